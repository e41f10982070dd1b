"""Records and ranking backend for the multiplication-tables game."""

__version__ = "0.3.0"
