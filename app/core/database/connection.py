# File: app/core/database/connection.py

from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine, make_url


def document_store_url(endpoint: str, key: Optional[str], database: str) -> URL:
    """
    Combines the configured endpoint, key and logical database name
    into a single SQLAlchemy URL.

    e.g. postgresql://postgres@db:5432 + "secret" + "transcripts"
         -> postgresql://postgres:secret@db:5432/transcripts
    """
    url = make_url(endpoint)
    if key:
        url = url.set(password=key)
    return url.set(database=database)


@contextmanager
def scoped_engine(url: URL) -> Iterator[Engine]:
    """
    Acquires an engine for the duration of one invocation and always
    disposes its connection pool afterwards.
    """
    # check_same_thread=False is needed only for SQLite
    connect_args = {"check_same_thread": False} if url.get_backend_name() == "sqlite" else {}

    engine = create_engine(
        url,
        echo=False,
        pool_pre_ping=True,
        connect_args=connect_args
    )
    try:
        yield engine
    finally:
        engine.dispose()
