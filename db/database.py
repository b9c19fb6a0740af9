from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

#base class for declarative models
Base = declarative_base()


def _is_memory_sqlite(database_url: str) -> bool:
    return database_url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in database_url


def create_db_engine(database_url: str) -> Engine:
    """Create the SQLAlchemy engine for the configured database URL."""
    if database_url.startswith("sqlite"):
        engine_kwargs = {"connect_args": {"check_same_thread": False}}
        if _is_memory_sqlite(database_url):
            # one shared connection, otherwise every session sees an empty database
            engine_kwargs["poolclass"] = StaticPool
        engine = create_engine(database_url, echo=False, **engine_kwargs)

        # SQLite only honours ON DELETE CASCADE with foreign keys switched on
        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    # Create the database/SQLAlchemy engine with additional configurations
    return create_engine(
        database_url,
        echo=False,  # Set to True for SQL debugging
        pool_pre_ping=True,  # Verify connections before use
        pool_recycle=300,    # Recycle connections every 5 minutes
        pool_size=5,         # Connection pool size
        max_overflow=10      # Max overflow connections
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    # Create a configured "Session" class
    return sessionmaker(autoflush=False, expire_on_commit=False, bind=engine)


# dependency for database session
def get_db(request: Request):
    db = request.app.state.container.session_factory()
    try:
        yield db
    finally:
        db.close()
