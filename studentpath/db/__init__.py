"""
Database module - PostgreSQL and MongoDB connections.
"""
from studentpath.db.postgres import get_db_session, postgres_is_reachable
from studentpath.db.mongodb import get_mongo_db, mongo_is_reachable

__all__ = [
    "get_db_session",
    "postgres_is_reachable",
    "get_mongo_db",
    "mongo_is_reachable"
]
