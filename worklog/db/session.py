from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from worklog.core.config import settings

database_url = settings.DATABASE_URL
engine_kwargs = {"pool_pre_ping": True, "echo": False}

if database_url.startswith("sqlite"):
    # SQLite connections are shared across FastAPI worker threads and the report queue
    engine_kwargs["connect_args"] = {"check_same_thread": False, "timeout": 30}
else:
    if "mysql" in database_url.lower() and "charset" not in database_url.lower():
        separator = "&" if "?" in database_url else "?"
        database_url = f"{database_url}{separator}charset=utf8mb4"
    # pool_recycle: avoid MySQL dropping idle connections
    # pool_timeout: never block indefinitely waiting for a connection
    engine_kwargs.update(
        pool_size=20,
        max_overflow=10,
        pool_recycle=3600,
        pool_timeout=30,
    )

engine = create_engine(database_url, **engine_kwargs)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


# Dependency for FastAPI
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory():
    """Session factory used by background jobs that outlive the request session."""
    return SessionLocal
