from typing import Optional, Tuple
import logging
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from models.qa_log import QALog
from services.errors import DownstreamUnavailable, NotFound

MANUAL_SESSION = "manual"

class CorrectionStore:
    """Question/answer log and the corrections attached to it.

    Entries are only ever inserted or have their correccion overwritten.
    Similar questions are found with the database's trigram similarity().
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        similarity_threshold: float = 0.70,
        logger: Optional[logging.Logger] = None
    ):
        self.logger = logger or logging.getLogger(__name__)
        self.session_factory = session_factory
        self.similarity_threshold = similarity_threshold

    def _most_similar(self, db: Session, question: str, corrected_only: bool) -> Optional[Tuple[QALog, float]]:
        score = func.similarity(QALog.pregunta, question)
        query = db.query(QALog, score.label("score")).filter(score > self.similarity_threshold)
        if corrected_only:
            query = query.filter(QALog.correccion.isnot(None), func.trim(QALog.correccion) != "")
        row = query.order_by(score.desc(), QALog.fecha.desc(), QALog.id.desc()).first()
        if row is None:
            return None
        return row[0], float(row[1])

    def find_similar_correction(self, question: str) -> Optional[QALog]:
        """Most similar corrected entry above the threshold, most recent on ties"""
        try:
            with self.session_factory() as db:
                match = self._most_similar(db, question, corrected_only=True)
        except SQLAlchemyError as e:
            self.logger.error(f"Error searching corrections: {str(e)}")
            raise DownstreamUnavailable("No se pudo consultar el historial") from e

        if match is None:
            return None
        entry, score = match
        self.logger.info(f"Found correction #{entry.id} (similarity {score:.2f}) for: {question}")
        return entry

    def log_interaction(self, session_id: str, question: str, answer: str) -> QALog:
        try:
            with self.session_factory() as db:
                entry = QALog(session_id=session_id, pregunta=question, respuesta=answer)
                db.add(entry)
                db.commit()
                db.refresh(entry)
                return entry
        except SQLAlchemyError as e:
            self.logger.error(f"Error storing interaction: {str(e)}")
            raise DownstreamUnavailable("No se pudo guardar el historial") from e

    def submit_correction(
        self,
        question: str,
        correction: str,
        session_id: Optional[str] = None
    ) -> Tuple[QALog, bool]:
        """Attach a correction to the most similar logged question, or log a new one.

        Returns the entry and whether it was newly created.
        """
        try:
            with self.session_factory() as db:
                match = self._most_similar(db, question, corrected_only=False)
                if match is not None:
                    entry, score = match
                    entry.correccion = correction
                    created = False
                    self.logger.info(f"Updating correction of #{entry.id} (similarity {score:.2f})")
                else:
                    entry = QALog(
                        session_id=session_id or MANUAL_SESSION,
                        pregunta=question,
                        correccion=correction
                    )
                    db.add(entry)
                    created = True
                db.commit()
                db.refresh(entry)
                if created:
                    self.logger.info(f"Stored new correction #{entry.id}")
                return entry, created
        except SQLAlchemyError as e:
            self.logger.error(f"Error storing correction: {str(e)}")
            raise DownstreamUnavailable("No se pudo guardar la corrección") from e

    def update_correction(self, entry_id: int, correction: str) -> QALog:
        try:
            with self.session_factory() as db:
                entry = db.get(QALog, entry_id)
                if entry is None:
                    raise NotFound(f"No existe el registro {entry_id}")
                entry.correccion = correction
                db.commit()
                db.refresh(entry)
                self.logger.info(f"Correction of #{entry_id} overwritten")
                return entry
        except SQLAlchemyError as e:
            self.logger.error(f"Error updating correction {entry_id}: {str(e)}")
            raise DownstreamUnavailable("No se pudo actualizar la corrección") from e
