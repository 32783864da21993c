import pytest
from conftest import count_logs
from services.keyword_assistant import HELP_MESSAGE, KeywordAssistant, classify
from services.session_memory import Exchange, InMemorySessionMemory, RedisSessionMemory

@pytest.mark.parametrize("question,bucket", [
    ("¿Cuántas tareas pendientes hay?", "pendientes"),
    ("¿Cuántas tareas finalizadas hay?", "finalizadas"),
    ("¿Cuál fue la última tarea?", "ultima"),
    ("Tareas por área", "por_area"),
    ("¿Quién cargó más tareas?", "por_usuario"),
    ("¿Cuántas tareas hay?", "total"),
])
def test_classify(question, bucket):
    assert classify(question).name == bucket

def test_classify_unknown_question():
    assert classify("Hola, ¿cómo estás?") is None

@pytest.mark.asyncio
async def test_canned_answers(keyword_assistant):
    assert await keyword_assistant.answer("¿Cuántas tareas pendientes hay?", "s1") == "Hay 4 tareas pendientes."
    assert await keyword_assistant.answer("¿Cuántas tareas finalizadas hay?", "s1") == "Hay 1 tarea finalizada."
    assert await keyword_assistant.answer("¿Cuántas tareas hay?", "s1") == "Hay 5 tareas registradas en total."
    assert await keyword_assistant.answer("Tareas por área", "s1") == "Tareas por área:\n- Area 7: 3\n- Area 3: 2"
    assert await keyword_assistant.answer("¿Cuál es la última tarea?", "s1") == (
        "La última tarea registrada es la #5: Configurar correo (Area 7, 05/10/2026 09:30)."
    )
    assert await keyword_assistant.answer("Hola", "s1") == HELP_MESSAGE

@pytest.mark.asyncio
async def test_follow_up_reuses_previous_question(keyword_assistant, seeded):
    first = await keyword_assistant.answer("¿Cuántas tareas pendientes hay?", "s1")
    follow_up = await keyword_assistant.answer("y cuántas", "s1")

    assert first == "Hay 4 tareas pendientes."
    assert follow_up == first
    assert count_logs(seeded) == 2

@pytest.mark.asyncio
async def test_follow_up_is_scoped_to_its_session(keyword_assistant):
    await keyword_assistant.answer("¿Cuántas tareas pendientes hay?", "s1")

    # Nothing to continue in s2, so "y cuántas" is a plain total question there
    assert await keyword_assistant.answer("y cuántas", "s2") == "Hay 5 tareas registradas en total."

def test_resolve_follow_up(seeded, memory):
    assistant = KeywordAssistant(seeded, memory)
    assert assistant.resolve_follow_up("y cuántas", "s1") == "y cuántas"

    memory.remember("s1", Exchange("¿Cuántas tareas finalizadas hay?", "Hay 1 tarea finalizada."))
    assert assistant.resolve_follow_up("¿Y cuántas?", "s1") == "¿Cuántas tareas finalizadas hay? ¿Y cuántas?"
    assert assistant.resolve_follow_up("yo quiero saber", "s1") == "yo quiero saber"

def test_session_window_is_bounded():
    memory = InMemorySessionMemory(window=10)
    for i in range(15):
        memory.remember("s1", Exchange(f"pregunta {i}", f"respuesta {i}"))

    recent = memory.recent("s1")
    assert len(recent) == 10
    assert recent[0].question == "pregunta 14"
    assert recent[-1].question == "pregunta 5"

def test_least_recently_used_session_is_evicted():
    memory = InMemorySessionMemory(window=10, max_sessions=2)
    memory.remember("a", Exchange("p", "r"))
    memory.remember("b", Exchange("p", "r"))
    memory.last("a")
    memory.remember("c", Exchange("p", "r"))

    assert memory.last("b") is None
    assert memory.last("a") is not None
    assert memory.last("c") is not None

class FakeRedis:
    """Just the list commands RedisSessionMemory uses"""

    def __init__(self):
        self.lists = {}
        self.ttls = {}

    def pipeline(self):
        return self

    def lpush(self, key, value):
        self.lists.setdefault(key, []).insert(0, value.encode("utf-8"))

    def ltrim(self, key, start, end):
        self.lists[key] = self.lists.get(key, [])[start:end + 1]

    def expire(self, key, seconds):
        self.ttls[key] = seconds

    def execute(self):
        return []

    def lrange(self, key, start, end):
        return self.lists.get(key, [])[start:end + 1]

def test_redis_session_window_is_trimmed_and_expires():
    client = FakeRedis()
    memory = RedisSessionMemory(client, window=10, ttl_seconds=600)
    for i in range(12):
        memory.remember("s1", Exchange(f"pregunta {i}", f"respuesta {i}"))

    assert len(client.lists["ia:sesion:s1"]) == 10
    assert client.ttls["ia:sesion:s1"] == 600
    assert memory.last("s1") == Exchange("pregunta 11", "respuesta 11")
    assert memory.recent("s1")[-1].question == "pregunta 2"
    assert memory.last("otra") is None
