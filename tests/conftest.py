"""Shared fixtures: in-memory database and API client."""

from __future__ import annotations

import os

# Must be set before the application modules build their engine.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

from cosmotablas.app import create_app
from cosmotablas.core import engine
from cosmotablas.services import RecordsLedger


class FakeClock:
    """Deterministic epoch-ms clock advancing one second per call."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        self.now += 1000
        return self.now


@pytest.fixture(autouse=True)
def fresh_database():
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    yield
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session():
    with Session(engine) as db_session:
        yield db_session


@pytest.fixture
def client():
    return TestClient(create_app())


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ledger(clock):
    return RecordsLedger(clock=clock)
