import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from lokal.core.database import Base, enable_sqlite_foreign_keys
import lokal.models  # noqa: F401


def build_session():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    return testing_session_local()


@pytest.fixture
def db():
    session = build_session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def _no_mock_data(monkeypatch):
    monkeypatch.setattr("lokal.core.config.ENABLE_MOCK_DATA", False)
    monkeypatch.setattr("lokal.core.config.SUPER_ADMIN_EMAILS", {"owner@lokal.app"})
