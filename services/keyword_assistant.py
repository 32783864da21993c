from typing import Callable, List, Optional
from dataclasses import dataclass
import logging
import re
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from models.task import TaskDB
from services.errors import DownstreamUnavailable
from services.session_memory import Exchange

HELP_MESSAGE = (
    "No entendí la pregunta. Podés preguntar por tareas pendientes, finalizadas, "
    "la última tarea registrada o el total de tareas por área o por usuario."
)

_FOLLOW_UP = re.compile(r"^\s*¿?\s*y\s+", re.IGNORECASE)


def _plural(n: int, singular: str, plural: str) -> str:
    return singular if n == 1 else plural


def _pending(db: Session) -> str:
    n = db.query(func.count(TaskDB.id)).filter(TaskDB.fin.is_not(True)).scalar() or 0
    return f"Hay {n} {_plural(n, 'tarea pendiente', 'tareas pendientes')}."


def _finished(db: Session) -> str:
    n = db.query(func.count(TaskDB.id)).filter(TaskDB.fin.is_(True)).scalar() or 0
    return f"Hay {n} {_plural(n, 'tarea finalizada', 'tareas finalizadas')}."


def _latest(db: Session) -> str:
    task = db.query(TaskDB).order_by(TaskDB.fecha.desc(), TaskDB.id.desc()).first()
    if task is None:
        return "Todavía no hay tareas registradas."
    fecha = task.fecha.strftime("%d/%m/%Y %H:%M") if task.fecha else "sin fecha"
    return f"La última tarea registrada es la #{task.id}: {task.tarea} ({task.area or 'sin área'}, {fecha})."


def _tally(db: Session, column, header: str) -> str:
    rows = (
        db.query(column, func.count(TaskDB.id))
        .group_by(column)
        .order_by(func.count(TaskDB.id).desc(), column)
        .all()
    )
    if not rows:
        return "Todavía no hay tareas registradas."
    lines = [header]
    lines.extend(f"- {key or 'sin dato'}: {count}" for key, count in rows)
    return "\n".join(lines)


def _per_area(db: Session) -> str:
    return _tally(db, TaskDB.area, "Tareas por área:")


def _per_user(db: Session) -> str:
    return _tally(db, TaskDB.usuario, "Tareas por usuario:")


def _total(db: Session) -> str:
    n = db.query(func.count(TaskDB.id)).scalar() or 0
    return f"Hay {n} {_plural(n, 'tarea registrada', 'tareas registradas')} en total."


@dataclass(frozen=True)
class KeywordRule:
    name: str
    pattern: re.Pattern
    respond: Callable[[Session], str]


# Checked in order; specific buckets before the generic count
RULES: List[KeywordRule] = [
    KeywordRule("pendientes", re.compile(r"pendiente|sin resolver|sin terminar|abiertas"), _pending),
    KeywordRule("finalizadas", re.compile(r"finalizad|terminad|resuelt|cerrad|completad"), _finished),
    KeywordRule("ultima", re.compile(r"[úu]ltim|m[áa]s reciente"), _latest),
    KeywordRule("por_area", re.compile(r"por [áa]rea|cada [áa]rea|qu[ée] [áa]rea"), _per_area),
    KeywordRule("por_usuario", re.compile(r"por usuario|cada usuario|qui[ée]n"), _per_user),
    KeywordRule("total", re.compile(r"cu[áa]nt|total|cantidad"), _total),
]


def classify(question: str) -> Optional[KeywordRule]:
    text = question.lower()
    for rule in RULES:
        if rule.pattern.search(text):
            return rule
    return None


class KeywordAssistant:
    """Answers from canned aggregates picked by keyword, no language model.

    Questions starting with "y ..." are read as follow-ups of the previous
    question in the same session.
    """

    def __init__(self, session_factory: sessionmaker, memory, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self.session_factory = session_factory
        self.memory = memory

    def resolve_follow_up(self, question: str, session_id: str) -> str:
        if not _FOLLOW_UP.match(question):
            return question
        previous = self.memory.last(session_id)
        if previous is None:
            return question
        resolved = f"{previous.question} {question.strip()}"
        self.logger.info(f"Follow-up resolved for session {session_id}: {resolved}")
        return resolved

    async def answer(self, question: str, session_id: str) -> str:
        resolved = self.resolve_follow_up(question, session_id)
        rule = classify(resolved)

        if rule is None:
            self.logger.info(f"No keyword bucket for: {resolved}")
            answer = HELP_MESSAGE
        else:
            self.logger.info(f"Keyword bucket '{rule.name}' for: {resolved}")
            try:
                with self.session_factory() as db:
                    answer = rule.respond(db)
            except SQLAlchemyError as e:
                self.logger.error(f"Error running canned query '{rule.name}': {str(e)}")
                raise DownstreamUnavailable("No se pudo consultar la base de datos") from e

        self.memory.remember(session_id, Exchange(question=resolved, answer=answer))
        return answer
