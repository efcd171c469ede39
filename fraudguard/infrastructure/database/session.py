"""Database session management for direct SQL backend access"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from fraudguard.config import settings

# Created lazily: REST deployments never open a database connection
_engine = None
_session_factory = None


def connect_args_for(url: str) -> dict:
    """Per-connection options; Postgres gets a statement timeout"""
    if url.startswith("postgresql"):
        return {"options": f"-c statement_timeout={settings.db_statement_timeout_ms}"}
    return {}


def get_engine():
    global _engine
    if _engine is None:
        _engine = create_engine(
            settings.database_url,
            pool_pre_ping=True,  # Verify connections before using
            pool_size=10,
            max_overflow=10,
            pool_recycle=3600,
            connect_args=connect_args_for(settings.database_url),
        )
    return _engine


def get_session_factory() -> sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
    return _session_factory
