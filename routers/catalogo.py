from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from database import get_db
from models.catalog import AreaDB, ServicioDB, AreaResponse, ServicioResponse

router = APIRouter(tags=["catalogo"])

@router.get("/areas", response_model=List[AreaResponse])
async def list_areas(db: Session = Depends(get_db)):
    return db.query(AreaDB).order_by(AreaDB.id).all()

@router.get("/servicios", response_model=List[ServicioResponse])
async def list_services(db: Session = Depends(get_db)):
    return db.query(ServicioDB).order_by(ServicioDB.servicio).all()
