from conftest import count_logs, make_client
from main import app
from models.qa_log import QALog
from services.query_assistant import QueryAssistant
from services.query_executor import QueryExecutor

def test_ask_requires_question_and_session(client, seeded):
    """Missing fields answer 400 and write nothing"""
    for body in [{}, {"pregunta": "¿Cuántas tareas hay?"}, {"sessionId": "s1"}, {"pregunta": "", "sessionId": "s1"}]:
        response = client.post("/api/ia", json=body)
        assert response.status_code == 400
        assert "error" in response.json()
    assert count_logs(seeded) == 0

def test_ask_rejects_non_string_fields(client, seeded):
    response = client.post("/api/ia", json={"pregunta": ["hola"], "sessionId": "s1"})
    assert response.status_code == 400
    assert "error" in response.json()
    assert count_logs(seeded) == 0

def test_ask_pending_tasks(client, generator, seeded):
    generator.reply = "SELECT COUNT(*) FROM ric01 WHERE fin IS NULL OR fin = false"

    response = client.post("/api/ia", json={"pregunta": "¿Cuántas tareas pendientes hay?", "sessionId": "s1"})

    assert response.status_code == 200
    assert response.json() == {"respuesta": "El resultado es 4."}
    with seeded() as db:
        entry = db.query(QALog).one()
    assert entry.pregunta == "¿Cuántas tareas pendientes hay?"
    assert entry.respuesta == "El resultado es 4."

def test_malformed_generated_sql_is_not_a_server_error(client, generator, seeded):
    generator.reply = "SELECT prioridad FROM ric01"

    response = client.post("/api/ia", json={"pregunta": "¿Qué prioridad tienen las tareas?", "sessionId": "s1"})

    assert response.status_code == 200
    assert "SELECT prioridad FROM ric01" in response.json()["respuesta"]
    assert count_logs(seeded) == 1

def test_language_model_outage_is_500(seeded, engine, store, unavailable_generator):
    assistant = QueryAssistant(store, QueryExecutor(engine), generator=unavailable_generator)
    client = make_client(seeded, assistant)
    try:
        response = client.post("/api/ia", json={"pregunta": "¿Cuántas tareas hay?", "sessionId": "s1"})
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"error": "El servicio de lenguaje no está disponible"}
    assert count_logs(seeded) == 0

def test_correction_flow(client, generator, seeded):
    generator.reply = "SELECT 'respuesta del modelo'"
    client.post("/api/ia", json={"pregunta": "¿Cuántas tareas pendientes hay en el área 3?", "sessionId": "s1"})

    correction = "SELECT COUNT(*) FROM ric01 WHERE area = 'Area 3' AND (fin IS NULL OR fin = false)"
    response = client.post("/api/ia/corregir", json={
        "pregunta_original": "¿Cuántas tareas pendientes hay en el área 3?",
        "correccion": correction,
        "sessionId": "s1"
    })
    assert response.status_code == 200
    entry_id = response.json()["id"]
    assert response.json()["mensaje"]

    # Same correction again: still a single row
    response = client.post("/api/ia/corregir", json={
        "pregunta_original": "cuántas tareas pendientes hay en el área 3",
        "correccion": correction
    })
    assert response.json()["id"] == entry_id
    assert count_logs(seeded) == 1

    response = client.post("/api/ia", json={"pregunta": "¿Cuántas tareas pendientes hay en el área 7?", "sessionId": "s2"})
    assert response.json() == {"respuesta": "El resultado es 3."}

def test_correction_requires_fields(client, seeded):
    response = client.post("/api/ia/corregir", json={"pregunta_original": "¿Cuántas tareas hay?"})
    assert response.status_code == 400
    assert "error" in response.json()
    assert count_logs(seeded) == 0

def test_update_correction(client, seeded):
    created = client.post("/api/ia/corregir", json={
        "pregunta_original": "¿Quién atiende el área 3?",
        "correccion": "Mantenimiento"
    }).json()

    response = client.put(f"/api/ia/corregir/{created['id']}", json={"nuevaRespuesta": "Sistemas"})
    assert response.status_code == 200
    assert response.json()["id"] == created["id"]
    with seeded() as db:
        assert db.get(QALog, created["id"]).correccion == "Sistemas"

def test_update_unknown_correction_is_404(client):
    response = client.put("/api/ia/corregir/9999", json={"nuevaRespuesta": "Sistemas"})
    assert response.status_code == 404
    assert "error" in response.json()

def test_update_correction_requires_text(client):
    response = client.put("/api/ia/corregir/1", json={})
    assert response.status_code == 400

def test_keyword_mode_follow_up(keyword_client):
    first = keyword_client.post("/api/ia", json={"pregunta": "¿Cuántas tareas pendientes hay?", "sessionId": "s9"})
    follow_up = keyword_client.post("/api/ia", json={"pregunta": "y cuántas", "sessionId": "s9"})

    assert first.json() == {"respuesta": "Hay 4 tareas pendientes."}
    assert follow_up.json() == first.json()
