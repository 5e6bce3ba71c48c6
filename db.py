# db.py

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from config import DATABASE_URL

# ─── Database connection ───
# Create engine with sensible defaults.  For SQLite we must also disable the
# thread check so request handlers running in the thread pool can share it.
engine_kwargs = dict(
    pool_pre_ping=True,
    pool_recycle=1800,
    pool_size=10,
    max_overflow=20,
    pool_timeout=30,
)

if DATABASE_URL.startswith("sqlite"):
    engine_kwargs["connect_args"] = {"check_same_thread": False}

engine = create_engine(DATABASE_URL, **engine_kwargs)

Base = declarative_base()

# We set expire_on_commit=False so that after commit our objects do not expire
SessionLocal = sessionmaker(
    bind            = engine,
    autoflush       = False,
    autocommit      = False,
    expire_on_commit=False
)


def get_db():
    """Yield a session for one request and always close it afterwards."""

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
