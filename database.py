"""
SQLAlchemy database connection and session management.

This module provides:
- Engine configuration for the primary store and an optional read replica
- Session factories for dependency injection
- Connection utilities

Usage:
     from database import get_session, engine

     # In FastAPI routes:
     @app.get("/tenants")
     def get_tenants(db: Session = Depends(get_session)):
          return db.query(Tenant).all()
"""
import logging
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

import config

logger = logging.getLogger(__name__)


def build_engine(url: str) -> Engine:
     """Create an engine with pooling and timeouts suited to the dialect."""
     if url.startswith("sqlite"):
          return create_engine(
               url,
               connect_args={"check_same_thread": False, "timeout": config.DB_POOL_TIMEOUT},
               echo=config.SQL_ECHO,
          )

     connect_args = {}
     if url.startswith("postgresql"):
          connect_args["options"] = f"-c statement_timeout={config.DB_STATEMENT_TIMEOUT_MS}"

     return create_engine(
          url,
          pool_size=5,
          max_overflow=10,
          pool_timeout=config.DB_POOL_TIMEOUT,
          pool_recycle=1800,  # Recycle connections after 30 minutes
          pool_pre_ping=True,
          connect_args=connect_args,
          echo=config.SQL_ECHO,
     )


def configure_sqlite(engine: Engine) -> None:
     """
     Enforce foreign keys and let SQLAlchemy own BEGIN on SQLite.

     pysqlite otherwise defers BEGIN until the first DML statement, which
     breaks SAVEPOINT handling inside begin_nested().
     """
     @event.listens_for(engine, "connect")
     def _on_connect(dbapi_connection, connection_record):
          dbapi_connection.isolation_level = None
          cursor = dbapi_connection.cursor()
          cursor.execute("PRAGMA foreign_keys=ON")
          cursor.close()

     @event.listens_for(engine, "begin")
     def _on_begin(conn):
          conn.exec_driver_sql("BEGIN")


engine = build_engine(config.DATABASE_URL)
read_engine = build_engine(config.READ_REPLICA_URL) if config.READ_REPLICA_URL else engine

for _engine in {engine, read_engine}:
     if _engine.dialect.name == "sqlite":
          configure_sqlite(_engine)

# Session factories
SessionLocal = sessionmaker(
     bind=engine,
     autocommit=False,
     autoflush=False,
     expire_on_commit=False,
)

ReadSessionLocal = sessionmaker(
     bind=read_engine,
     autocommit=False,
     autoflush=False,
     expire_on_commit=False,
)


def get_session() -> Generator[Session, None, None]:
     """
     FastAPI dependency that provides a transactional session.

     The whole request runs as one transaction: it commits when the route
     returns and rolls back on any exception, so a rejected lifecycle
     operation never leaves a partial record behind.

     Yields:
          Session: SQLAlchemy database session
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


def get_read_session() -> Generator[Session, None, None]:
     """
     FastAPI dependency for read-only aggregate queries.

     Bound to READ_REPLICA_URL when configured, so results may trail the
     latest writes slightly.
     """
     session = ReadSessionLocal()
     try:
          yield session
     finally:
          session.rollback()
          session.close()


@contextmanager
def get_session_context() -> Generator[Session, None, None]:
     """
     Context manager for database sessions (for scheduled jobs and scripts).

     Usage:
          with get_session_context() as db:
               RentLedgerService.roll_over(db, as_of=date.today())

     Yields:
          Session: SQLAlchemy database session
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


def check_connection() -> bool:
     """
     Test database connectivity.

     Returns:
          bool: True if connection successful, False otherwise
     """
     try:
          with engine.connect() as conn:
               conn.execute(text("SELECT 1"))
          return True
     except Exception as e:
          logger.error("Database connection failed: %s", e)
          return False
