"""Database package."""
from meetpoll.db.session import engine, SessionLocal, get_db
from meetpoll.db.base import Base

__all__ = ["engine", "SessionLocal", "get_db", "Base"]
