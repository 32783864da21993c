from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean
from pydantic import BaseModel
from datetime import datetime
from database import Base

class TaskDB(Base):
    __tablename__ = "ric01"

    id = Column(Integer, primary_key=True, index=True)
    usuario = Column(String(100))
    tarea = Column(Text)
    fecha = Column(DateTime)
    area = Column(String(100), index=True)
    fin = Column(Boolean, default=False)
    imagen = Column(Text, nullable=True)
    fecha_comp = Column(DateTime, nullable=True)
    fecha_fin = Column(DateTime, nullable=True)
    solucion = Column(Text, nullable=True)
    asignado = Column(String(100), nullable=True)
    servicio = Column(String(100), nullable=True)
    subservicio = Column(String(100), nullable=True)
    calificacion = Column(Integer, nullable=True)
    reasignado_a = Column(String(100), nullable=True)
    reasignado_por = Column(String(100), nullable=True)

# Column descriptions handed to the language model when generating SQL
TASK_COLUMNS = {
    "id": "identificador de la tarea",
    "usuario": "nombre del usuario que registró la tarea",
    "tarea": "descripción de la tarea",
    "fecha": "fecha y hora de registro",
    "area": "área responsable, con valores como 'Area 3'",
    "fin": "true si el usuario dio la tarea por finalizada",
    "imagen": "imagen adjunta (opcional)",
    "fecha_comp": "fecha en que el personal cargó la solución",
    "fecha_fin": "fecha de finalización",
    "solucion": "solución cargada por el personal (NULL si no está resuelta)",
    "asignado": "persona del área que resolvió la tarea",
    "servicio": "servicio del usuario",
    "subservicio": "subservicio del usuario",
    "calificacion": "calificación de 1 a 5 dada por el usuario",
    "reasignado_a": "área a la que se reasignó la tarea",
    "reasignado_por": "quién reasignó la tarea",
}

class TaskCreate(BaseModel):
    usuario: str
    tarea: str
    area: str | None = None
    fin: bool = False
    imagen: str | None = None
    servicio: str | None = None
    subservicio: str | None = None

class TaskSolution(BaseModel):
    solucion: str
    asignado: str | None = None

class TaskFinish(BaseModel):
    fin: bool

class TaskRating(BaseModel):
    calificacion: int | None = None

class TaskReassign(BaseModel):
    nueva_area: str
    reasignado_por: str | None = None

class TaskResponse(BaseModel):
    id: int
    usuario: str | None = None
    tarea: str | None = None
    fecha: datetime | None = None
    area: str | None = None
    fin: bool | None = None
    imagen: str | None = None
    fecha_comp: datetime | None = None
    fecha_fin: datetime | None = None
    solucion: str | None = None
    asignado: str | None = None
    servicio: str | None = None
    subservicio: str | None = None
    calificacion: int | None = None
    reasignado_a: str | None = None
    reasignado_por: str | None = None

    class Config:
        from_attributes = True
