from typing import Optional
import logging
import re
from models.qa_log import QALog
from services.answer_formatter import format_results
from services.correction_store import CorrectionStore
from services.errors import InvalidRequest, QueryExecutionFailed
from services.keyword_assistant import KeywordAssistant
from services.query_executor import QueryExecutor
from services.sql_candidate import SQLCandidate
from services.sql_generator import SQLGenerator

LLM_MODE = "llm"
KEYWORDS_MODE = "keywords"

INVALID_CORRECTION = "La corrección guardada no es una consulta válida."
EMPTY_GENERATION = "No pude generar una consulta para esa pregunta."

_AREA = re.compile(r"\b[áa]rea\s+(\d+)\b", re.IGNORECASE)


def extract_area(text: str) -> Optional[str]:
    """Area number mentioned as "área N" / "area N", normalized ("07" -> "7")"""
    match = _AREA.search(text or "")
    if match is None:
        return None
    return str(int(match.group(1)))


def rewrite_area_literal(sql: str, old_area: str, new_area: str) -> str:
    """Replace the quoted 'Area <old>' literal of a SQL statement with <new>"""
    pattern = re.compile(rf"'([áa]rea)\s+0*{old_area}'", re.IGNORECASE)
    return pattern.sub(lambda m: f"'{m.group(1)} {new_area}'", sql)


def _require_text(value, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidRequest(f"El campo '{field}' es obligatorio")
    return value.strip()


class QueryAssistant:
    """Answers natural-language questions about the task table.

    In "llm" mode a stored correction for a similar question is reused first
    (rewriting the area it mentions when needed); otherwise the language model
    writes the SQL. In "keywords" mode canned aggregates are used instead.
    Every answered question is logged.
    """

    def __init__(
        self,
        store: CorrectionStore,
        executor: QueryExecutor,
        generator: Optional[SQLGenerator] = None,
        keyword_assistant: Optional[KeywordAssistant] = None,
        mode: str = LLM_MODE,
        logger: Optional[logging.Logger] = None
    ):
        self.logger = logger or logging.getLogger(__name__)
        if mode not in (LLM_MODE, KEYWORDS_MODE):
            raise ValueError(f"Unknown assistant mode: {mode}")
        if mode == LLM_MODE and generator is None:
            raise ValueError("llm mode needs a SQL generator")
        if mode == KEYWORDS_MODE and keyword_assistant is None:
            raise ValueError("keywords mode needs a keyword assistant")
        self.store = store
        self.executor = executor
        self.generator = generator
        self.keyword_assistant = keyword_assistant
        self.mode = mode

    async def answer(self, question, session_id) -> str:
        question = _require_text(question, "pregunta")
        session_id = _require_text(session_id, "sessionId")
        self.logger.info(f"Question from session {session_id}: {question}")

        if self.mode == KEYWORDS_MODE:
            answer = await self.keyword_assistant.answer(question, session_id)
        else:
            answer = await self._answer_from_correction(question)
            if answer is None:
                answer = await self._answer_generated(question)

        self.store.log_interaction(session_id, question, answer)
        return answer

    async def _run(self, candidate: SQLCandidate) -> str:
        result = await self.executor.execute_query(candidate)
        try:
            return format_results(result["results"])
        except (ValueError, TypeError) as e:
            raise QueryExecutionFailed(f"Could not format result: {str(e)}", candidate.body) from e

    async def _answer_from_correction(self, question: str) -> Optional[str]:
        entry = self.store.find_similar_correction(question)
        if entry is None:
            return None

        candidate = SQLCandidate.from_text(entry.correccion)
        new_area = extract_area(question)
        old_area = extract_area(entry.pregunta)
        if new_area and old_area and new_area != old_area:
            if not candidate.is_sql:
                self.logger.info(
                    f"Correction #{entry.id} is about area {old_area}, question asks for area {new_area}; not reused"
                )
                return None
            candidate = candidate.with_body(rewrite_area_literal(candidate.body, old_area, new_area))
            self.logger.info(f"Correction #{entry.id} rewritten for area {new_area}: {candidate.body}")

        if not candidate.is_sql:
            return candidate.body

        try:
            return await self._run(candidate)
        except QueryExecutionFailed as e:
            self.logger.warning(f"Stored correction #{entry.id} failed: {e.message}")
            return INVALID_CORRECTION

    async def _answer_generated(self, question: str) -> str:
        candidate = await self.generator.generate_sql(question)
        if not candidate.is_sql:
            return candidate.body or EMPTY_GENERATION

        try:
            return await self._run(candidate)
        except QueryExecutionFailed as e:
            self.logger.warning(f"Generated SQL failed ({e.message}): {candidate.body}")
            return f"No pude ejecutar la consulta generada: {candidate.body}"

    def submit_correction(self, question, correction, session_id=None) -> QALog:
        question = _require_text(question, "pregunta_original")
        correction = _require_text(correction, "correccion")
        if session_id is not None and not isinstance(session_id, str):
            raise InvalidRequest("El campo 'sessionId' debe ser texto")
        entry, _ = self.store.submit_correction(question, correction, session_id or None)
        return entry

    def update_correction(self, entry_id: int, correction) -> QALog:
        correction = _require_text(correction, "nuevaRespuesta")
        return self.store.update_correction(entry_id, correction)
