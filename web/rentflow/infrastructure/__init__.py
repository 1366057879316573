from .database import engine, AsyncSessionFactory, get_session

__all__ = [
    "engine",
    "AsyncSessionFactory",
    "get_session",
]
