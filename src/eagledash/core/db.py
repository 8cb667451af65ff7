# Core - SQLite Connection Helper
#
# Every EagleDash SQLite database is opened through `transaction()` so that
# WAL mode and busy_timeout are always set, and so that each unit of work
# either commits as a whole or leaves the file untouched.

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Union


def open_connection(db_path: Union[str, Path]) -> sqlite3.Connection:
    """Open a SQLite connection with WAL mode and row access by name."""
    conn = sqlite3.connect(str(db_path))
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA busy_timeout=5000")
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def transaction(db_path: Union[str, Path]) -> Iterator[sqlite3.Connection]:
    """Yield a connection inside a single transaction.

    Commits when the block exits normally, rolls back when it raises.
    The connection is always closed afterwards.
    """
    conn = open_connection(db_path)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
