import os

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker, declarative_base

Base = declarative_base()

DEFAULT_DB_URL = "sqlite:///codegen_runs.db"


def get_database_url() -> str:
    """CODEGEN_DB_URL overrides the local SQLite file"""
    return os.environ.get("CODEGEN_DB_URL", DEFAULT_DB_URL)


def create_database_engine(db_url: str = DEFAULT_DB_URL) -> Engine:
    """Create the engine and the run tables"""
    # Request handlers may run on a different thread than the one that created the engine
    connect_args = {"check_same_thread": False} if db_url.startswith("sqlite") else {}
    engine = create_engine(db_url, echo=False, connect_args=connect_args)
    Base.metadata.create_all(engine)
    return engine


def create_session(engine: Engine) -> Session:
    SessionLocal = sessionmaker(bind=engine, autoflush=False)
    return SessionLocal()
