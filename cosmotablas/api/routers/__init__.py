"""Aggregate API routers."""

from fastapi import APIRouter

from .leaderboard import router as leaderboard_router
from .mistakes import router as mistakes_router
from .records import router as records_router
from .system import router as system_router

ALL_ROUTERS: tuple[APIRouter, ...] = (
    system_router,
    records_router,
    leaderboard_router,
    mistakes_router,
)

__all__ = ["ALL_ROUTERS"]
