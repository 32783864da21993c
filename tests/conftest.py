import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Module-level engine in database.py must not need a PostgreSQL driver
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime
import pytest
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from database import Base, build_engine, get_db
from dependencies import get_query_assistant
from models.task import TaskDB
from models.catalog import AreaDB, ServicioDB
from models.qa_log import QALog
from services.correction_store import CorrectionStore
from services.errors import DownstreamUnavailable
from services.keyword_assistant import KeywordAssistant
from services.query_assistant import QueryAssistant, KEYWORDS_MODE
from services.query_executor import QueryExecutor
from services.session_memory import InMemorySessionMemory
from services.sql_candidate import SQLCandidate

SEED_TASKS = [
    # usuario, tarea, area, fin, asignado
    ("Ana", "Cambiar lámpara del pasillo", "Area 3", False, None),
    ("Luis", "Reparar canilla", "Area 3", True, "Jorge"),
    ("Ana", "Revisar impresora", "Area 7", False, None),
    ("Marta", "Instalar antivirus", "Area 7", None, None),
    ("Luis", "Configurar correo", "Area 7", False, "Sofía"),
]


class StubSQLGenerator:
    """Stands in for the language model: always replies with the same text"""

    def __init__(self, reply: str = "", error: Exception = None):
        self.reply = reply
        self.error = error
        self.questions = []

    async def generate_sql(self, question: str) -> SQLCandidate:
        self.questions.append(question)
        if self.error is not None:
            raise self.error
        return SQLCandidate.from_text(self.reply)


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'tareas.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def seeded(session_factory):
    with session_factory() as db:
        for i, (usuario, tarea, area, fin, asignado) in enumerate(SEED_TASKS, start=1):
            db.add(TaskDB(
                usuario=usuario,
                tarea=tarea,
                area=area,
                fin=fin,
                asignado=asignado,
                fecha=datetime(2026, 10, i, 9, 30)
            ))
        db.add_all([AreaDB(area="Area 3"), AreaDB(area="Area 7")])
        db.add(ServicioDB(servicio="Clínica", subservicio="Guardia", area="Area 3"))
        db.commit()
    return session_factory


@pytest.fixture
def store(session_factory):
    return CorrectionStore(session_factory, similarity_threshold=0.70)


@pytest.fixture
def generator():
    return StubSQLGenerator()


@pytest.fixture
def llm_assistant(seeded, engine, store, generator):
    return QueryAssistant(store, QueryExecutor(engine), generator=generator)


@pytest.fixture
def memory():
    return InMemorySessionMemory(window=10)


@pytest.fixture
def keyword_assistant(seeded, engine, store, memory):
    return QueryAssistant(
        store,
        QueryExecutor(engine),
        keyword_assistant=KeywordAssistant(seeded, memory),
        mode=KEYWORDS_MODE
    )


def count_logs(session_factory) -> int:
    with session_factory() as db:
        return db.query(QALog).count()


def make_client(session_factory, assistant) -> TestClient:
    from main import app

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_query_assistant] = lambda: assistant
    return TestClient(app)


@pytest.fixture
def client(seeded, llm_assistant):
    from main import app
    yield make_client(seeded, llm_assistant)
    app.dependency_overrides.clear()


@pytest.fixture
def keyword_client(seeded, keyword_assistant):
    from main import app
    yield make_client(seeded, keyword_assistant)
    app.dependency_overrides.clear()


@pytest.fixture
def unavailable_generator():
    return StubSQLGenerator(error=DownstreamUnavailable("El servicio de lenguaje no está disponible"))
