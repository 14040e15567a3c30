"""
core/database.py -- SQLAlchemy engine factory shared by every store.

Both UserStore and SupplierStore build their engine here so SQLite gets the
same per-connection setup everywhere:
  - check_same_thread=False, because FastAPI runs sync handlers in a thread
    pool and pooled connections move between threads.
  - WAL journal mode, so readers are not blocked while a write is in flight.

Any other URL (e.g. postgresql://user:pw@host/db) is passed through untouched.
"""

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def make_engine(db_url: str) -> Engine:
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_wal_mode)
    return engine


def ping(engine: Engine) -> bool:
    """Return True if a trivial query succeeds. Used by the health endpoint."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
