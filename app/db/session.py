"""Database engine and session factory."""

import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import Settings
from app.db.transaction import IMMEDIATE

logger = logging.getLogger(__name__)


def _enable_sqlite_write_locking(engine: Engine) -> None:
    """
    Let write transactions take the SQLite write lock up front.

    pysqlite defers BEGIN until the first write, which lets two writers both
    read and then fail to upgrade their locks. Transactions started through
    begin_write() issue BEGIN IMMEDIATE instead, which serializes writers
    (serial allocation included) behind the busy timeout. Everything else
    issues a plain BEGIN, and WAL journaling keeps those readers from
    blocking writers.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        if conn.get_execution_options().get(IMMEDIATE):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")


class Database:
    """
    Persistence handle owned by the process bootstrap.

    Holds the engine and session factory for one configured store.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        connect_args = {}
        if settings.is_sqlite():
            connect_args = {"check_same_thread": False, "timeout": 30}

        self.engine = create_engine(
            settings.database_url,
            echo=settings.database_echo,
            connect_args=connect_args,
            future=True,
        )
        if settings.is_sqlite():
            _enable_sqlite_write_locking(self.engine)

        self.session_factory = sessionmaker(
            bind=self.engine,
            autoflush=False,
            expire_on_commit=False,
        )

    def session(self) -> Session:
        return self.session_factory()

    def create_schema(self) -> None:
        """Create all tables and seed the journal serial counter."""
        from app.models import Base
        from app.domain.accounting.sequence_service import ensure_sequence

        Base.metadata.create_all(bind=self.engine)
        db = self.session()
        try:
            ensure_sequence(db)
            db.commit()
        finally:
            db.close()
        logger.info(f"Schema ready on {self.engine.url.render_as_string(hide_password=True)}")

    def dispose(self) -> None:
        self.engine.dispose()
