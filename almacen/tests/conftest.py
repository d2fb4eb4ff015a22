import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import insert, select
from sqlalchemy.orm import Session, sessionmaker

from almacen.app.api.deps import get_db, get_notifier
from almacen.app.db.base import Base
from almacen.app.db.models.stock import Antibiotic, AntibiogramPanel, panel_antibiotic
from almacen.app.db.session import build_engine
from almacen.app.main import app
from almacen.services.notifier import NotificationResult, NotificationStatus


@pytest.fixture(scope="function")
def engine(tmp_path):
    """
    Esquema limpio por test.

    TEST_DATABASE_URL permite apuntar a un Postgres real (FOR UPDATE de verdad);
    por defecto SQLite en un fichero temporal.
    """
    url = os.getenv("TEST_DATABASE_URL") or f"sqlite:///{tmp_path / 'almacen.db'}"
    eng = build_engine(url)
    Base.metadata.drop_all(bind=eng)
    Base.metadata.create_all(bind=eng)
    try:
        yield eng
    finally:
        Base.metadata.drop_all(bind=eng)
        eng.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@pytest.fixture(scope="function")
def db_session(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seed(session_factory):
    """
    seed(antibiotics=[(code, name, qty, minimum)], panels={id: (name, [codes])})
    Todo se commitea en una sesión propia.
    """

    def _seed(antibiotics=(), panels=None):
        with session_factory() as s:
            for code, name, qty, minimum in antibiotics:
                s.add(Antibiotic(code=code, name=name, quantity=qty, minimum_threshold=minimum))
            s.flush()
            for panel_id, (panel_name, codes) in (panels or {}).items():
                s.add(AntibiogramPanel(id=panel_id, name=panel_name))
                s.flush()
                for code in codes:
                    s.execute(
                        insert(panel_antibiotic).values(antibiograma_id=panel_id, antibiotico_codigo=code)
                    )
            s.commit()

    return _seed


@pytest.fixture
def quantities(session_factory):
    """Foto {codigo: cantidad} leída con una sesión nueva."""

    def _quantities() -> dict[str, int]:
        with session_factory() as s:
            return dict(s.execute(select(Antibiotic.code, Antibiotic.quantity)).all())

    return _quantities


@pytest.fixture
def linked(session_factory):
    def _linked(panel_id: int) -> list[str]:
        with session_factory() as s:
            return sorted(
                s.execute(
                    select(panel_antibiotic.c.antibiotico_codigo).where(
                        panel_antibiotic.c.antibiograma_id == panel_id
                    )
                ).scalars()
            )

    return _linked


class RecordingNotifier:
    def __init__(self):
        self.calls = []

    def notify(self, rows):
        self.calls.append(list(rows))
        return NotificationResult(NotificationStatus.sent, message_id="<test@almacen>")


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def client(session_factory, notifier):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()
