from sqlalchemy import Column, Integer, DateTime, Text
from sqlalchemy.sql import func
from database import Base

class QALog(Base):
    """One assistant exchange; correccion holds a human-supplied SQL or text answer"""
    __tablename__ = "ia_historial"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Text, index=True, nullable=False)
    pregunta = Column(Text, nullable=False)
    respuesta = Column(Text, nullable=True)
    correccion = Column(Text, nullable=True)
    fecha = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<QALog(id={self.id}, session_id='{self.session_id}', pregunta='{self.pregunta}')>"
