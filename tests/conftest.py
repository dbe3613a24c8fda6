"""
conftest.py — Shared Test Fixtures for Visita360

Provides an in-memory SQLite database, an AppContext wired to it, a FastAPI
TestClient with dependency overrides, and factory helpers for visits and
follow-ups.

Business Rules:
- All tests run against an isolated in-memory DB
- Delivery goes to a LogNotifier so tests can inspect what was "sent"
- Each test function gets fresh tables

Called by: all test files via pytest autodiscovery
Depends on: visita360.models (Base), visita360.database (get_db), visita360.context
"""

import os

os.environ["TESTING"] = "1"  # Must be set before importing app modules
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["NOTIFICATION_WEBHOOK_URL"] = ""

from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from visita360.models import Base, FollowUp, Visit

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@event.listens_for(engine, "connect")
def _enable_fk(dbapi_conn, _):
    """SQLite ignores FKs by default — turn them on."""
    dbapi_conn.execute("PRAGMA foreign_keys=ON")


class MemoryStore:
    """Dict-backed stand-in for StateStore."""

    def __init__(self, initial: dict | None = None):
        self.data = dict(initial or {})
        self.writes = 0

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.data[key] = value
        self.writes += 1

    def delete(self, key):
        self.data.pop(key, None)


# ── Fixtures ─────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def db_session():
    """Create all tables, yield a session, then tear down."""
    Base.metadata.create_all(bind=engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def session_factory():
    return TestSessionLocal


@pytest.fixture()
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def context(session_factory):
    """AppContext on the test DB, delivering to a LogNotifier."""
    from visita360.config import settings
    from visita360.context import AppContext
    from visita360.notifiers import LogNotifier

    return AppContext(settings, session_factory, notifier=LogNotifier())


@pytest.fixture()
def client(db_session: Session, context) -> TestClient:
    """FastAPI TestClient with get_db and get_context overridden."""
    from visita360.context import get_context
    from visita360.database import get_db
    from visita360.main import app

    def _override_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_db
    app.dependency_overrides[get_context] = lambda: context

    yield TestClient(app)

    app.dependency_overrides.clear()


def make_visit(db: Session, **overrides) -> Visit:
    fields = {
        "data": date(2024, 1, 1),
        "endereco": "Rua Pedrália, 417 - São Paulo",
        "empresa": "Construtora Alpha",
        "segmento": "Empreiteiras",
        "responsavel": "Eng Civil",
        "estagio": "Inicial",
        "classificacao": "Forte",
        "vendedor": "Jhone",
    }
    fields.update(overrides)
    visit = Visit(**fields)
    db.add(visit)
    db.commit()
    db.refresh(visit)
    return visit


def make_followup(db: Session, visit: Visit, **overrides) -> FollowUp:
    fields = {"visita_id": visit.id, "data": visit.data, "status": "Retornou"}
    fields.update(overrides)
    fu = FollowUp(**fields)
    db.add(fu)
    db.commit()
    db.refresh(fu)
    return fu


@pytest.fixture()
def test_visit(db_session: Session) -> Visit:
    """An open visit dated 2024-01-01 with no follow-ups."""
    return make_visit(db_session)


@pytest.fixture()
def visit_factory(db_session: Session):
    """Create visits on the test session: visit_factory(empresa="X", data=...)."""
    return lambda **kw: make_visit(db_session, **kw)


@pytest.fixture()
def followup_factory(db_session: Session):
    """Create follow-ups: followup_factory(visit, status="Orçamento", ...)."""
    return lambda visit, **kw: make_followup(db_session, visit, **kw)
