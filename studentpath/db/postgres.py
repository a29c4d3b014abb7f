"""
PostgreSQL access.

All relational data (users, colleges, placements, resumes, career plans)
goes through one pooled engine. Services open a unit of work with
`get_db_session()`; reporting queries that only need plain dicts back use
`execute_raw_sql`.
"""
import logging
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session, sessionmaker

from studentpath.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# 5 pooled connections plus up to 10 during bursts; stale ones are
# replaced on checkout.
engine = create_engine(
    settings.postgres_url,
    pool_size=5,
    max_overflow=10,
    pool_pre_ping=True,
    echo=settings.debug,
)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


@contextmanager
def get_db_session() -> Iterator[Session]:
    """
    One transaction per block:

        with get_db_session() as db:
            db.execute(text("UPDATE students SET ..."), {...})

    Leaving the block commits; an exception inside it rolls back and
    propagates.
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def row_to_dict(row) -> Optional[dict]:
    if row is None:
        return None
    return dict(row._mapping)


def execute_raw_sql(sql: str, params: Optional[Dict] = None) -> List[dict]:
    """Run a read query and return every row as a dict."""
    with get_db_session() as db:
        rows = db.execute(text(sql), params or {}).fetchall()
    return [row_to_dict(row) for row in rows]


def postgres_is_reachable() -> bool:
    try:
        with get_db_session() as db:
            return db.execute(text("SELECT 1")).scalar() == 1
    except Exception as e:
        logger.error(f"PostgreSQL unreachable: {e}")
        return False
