"""A small microblogging HTTP API with users, login and chirps stored in SQLite."""

__version__ = "0.1.0"
__all__ = ["auth", "database", "responses", "server"]