# backoffice/deps.py
from typing import Generator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Connection, Engine

from backoffice.mls.client import MLSClient


def make_engine(database_url: str) -> Engine:
    """Single engine for the process."""
    return create_engine(
        database_url,
        future=True,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )

def get_conn(request: Request) -> Generator[Connection, None, None]:
    """
    FastAPI dependency that yields a SQLAlchemy Connection.
    IMPORTANT: Do NOT decorate with @contextmanager.
    """
    conn = request.app.state.engine.connect()
    try:
        yield conn
    finally:
        conn.close()

def get_mls(request: Request) -> MLSClient:
    return request.app.state.mls
