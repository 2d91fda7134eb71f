import logging
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import settings

logger = logging.getLogger(__name__)

# Execution option marking a connection that will write to the calendar
WRITE_LOCK_OPTION = "write_lock"

Base = declarative_base()


def _install_sqlite_hooks(engine: Engine, lock_timeout_seconds: float) -> None:
    """
    Take over transaction control from pysqlite.

    pysqlite defers BEGIN until the first DML statement, which lets two writers
    both read an empty calendar before either of them locks it. With implicit
    transactions turned off we emit BEGIN ourselves: write connections start with
    BEGIN IMMEDIATE and hold the database write lock for the whole check-then-insert,
    read connections use a plain deferred BEGIN and never wait on writers.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute(f"PRAGMA busy_timeout={int(lock_timeout_seconds * 1000)}")
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        if conn.get_execution_options().get(WRITE_LOCK_OPTION):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")


def build_engine(database_url: str, lock_timeout_seconds: float = 5.0, echo: bool = False) -> Engine:
    """Create an engine with the locking behaviour the reservation core relies on."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": lock_timeout_seconds}
    elif database_url.startswith("postgresql"):
        connect_args = {"options": f"-c lock_timeout={int(lock_timeout_seconds * 1000)}"}

    engine = create_engine(
        database_url,
        connect_args=connect_args,
        echo=echo,
        pool_pre_ping=True,
    )

    if engine.dialect.name == "sqlite":
        _install_sqlite_hooks(engine, lock_timeout_seconds)

    return engine


engine = build_engine(settings.database_url, settings.lock_timeout_seconds)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def get_db():
    """Dependency to get database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind: Engine = None):
    """Create all tables in the database"""
    from . import models  # noqa: F401  registers the mappers on Base

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables ready")
