import os
import tempfile

import pytest

# Use a dedicated SQLite database for these tests. Must be set before any
# project module reads the configuration.
TEST_DB = "sqlite:///./test.db"
os.environ["DATABASE_URL"] = TEST_DB
os.environ.setdefault("LOG_FILE", os.path.join(tempfile.gettempdir(), "parkphoto-tests.log"))


@pytest.fixture()
def setup_database():
    """Ensure a clean database for each test."""
    from db import Base, engine
    import models  # noqa: F401

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    try:
        os.remove("test.db")
    except FileNotFoundError:
        pass
