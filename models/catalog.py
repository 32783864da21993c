from sqlalchemy import Column, Integer, String
from pydantic import BaseModel
from database import Base

class AreaDB(Base):
    __tablename__ = "areas"

    id = Column(Integer, primary_key=True, index=True)
    area = Column(String(100), unique=True, index=True)

class ServicioDB(Base):
    __tablename__ = "servicios"

    id = Column(Integer, primary_key=True, index=True)
    servicio = Column(String(100))
    subservicio = Column(String(100))
    area = Column(String(100))

class AreaResponse(BaseModel):
    id: int
    area: str

    class Config:
        from_attributes = True

class ServicioResponse(BaseModel):
    servicio: str | None = None
    subservicio: str | None = None
    area: str | None = None

    class Config:
        from_attributes = True
