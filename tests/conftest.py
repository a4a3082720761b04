# tests/conftest.py
import os
import tempfile

# Must be set before app modules build the engine
_DB_DIR = tempfile.mkdtemp(prefix="tickets-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'tickets.db')}"

import pytest  # noqa: E402

from app.core.database import Base, SessionLocal, engine  # noqa: E402
from app.ticket import models  # noqa: E402,F401


@pytest.fixture(autouse=True)
def fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
