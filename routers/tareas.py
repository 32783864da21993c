from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import or_, and_
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from datetime import datetime
from zoneinfo import ZoneInfo
from typing import List
import logging
from database import get_db
from dependencies import get_settings
from models.task import (
    TaskDB, TaskCreate, TaskSolution, TaskFinish, TaskRating, TaskReassign, TaskResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tareas", tags=["tareas"])


def local_now() -> datetime:
    """Current wall-clock time in the configured timezone, stored without tzinfo"""
    return datetime.now(ZoneInfo(get_settings().timezone)).replace(tzinfo=None, second=0, microsecond=0)

def get_task_or_404(db: Session, task_id: int) -> TaskDB:
    task = db.get(TaskDB, task_id)
    if task is None:
        raise HTTPException(status_code=404, detail="Tarea no encontrada")
    return task

def commit_or_500(db: Session, detail: str):
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"{detail}: {str(e)}")
        raise HTTPException(status_code=500, detail=detail)


@router.get("", response_model=List[TaskResponse])
async def list_tasks(db: Session = Depends(get_db)):
    return db.query(TaskDB).order_by(TaskDB.fecha.desc()).all()

@router.get("/{area}", response_model=List[TaskResponse])
async def list_area_tasks(area: str, db: Session = Depends(get_db)):
    """Tasks of an area, including those reassigned to it and excluding those moved away"""
    return (
        db.query(TaskDB)
        .filter(or_(
            and_(TaskDB.area == area, TaskDB.reasignado_a.is_(None)),
            TaskDB.reasignado_a == area
        ))
        .order_by(TaskDB.fecha.desc())
        .all()
    )

@router.post("", response_model=TaskResponse, status_code=201)
async def create_task(task: TaskCreate, db: Session = Depends(get_db)):
    db_task = TaskDB(**task.model_dump(), fecha=local_now())
    db.add(db_task)
    commit_or_500(db, "Error creando tarea")
    db.refresh(db_task)
    logger.info(f"Task #{db_task.id} created for area {db_task.area}")
    return db_task

@router.put("/{task_id}/solucion")
async def update_solution(task_id: int, solution: TaskSolution, db: Session = Depends(get_db)):
    task = get_task_or_404(db, task_id)
    task.solucion = solution.solucion
    task.asignado = solution.asignado
    task.fecha_comp = local_now()
    commit_or_500(db, "Error al actualizar solución")
    return {"message": "Solución guardada"}

@router.put("/{task_id}", response_model=TaskResponse)
async def finish_task(task_id: int, finish: TaskFinish, db: Session = Depends(get_db)):
    task = get_task_or_404(db, task_id)
    task.fin = finish.fin
    task.fecha_fin = local_now()
    commit_or_500(db, "Error al finalizar tarea")
    db.refresh(task)
    return task

@router.put("/{task_id}/calificacion")
async def rate_task(task_id: int, rating: TaskRating, db: Session = Depends(get_db)):
    if rating.calificacion is None or not 1 <= rating.calificacion <= 5:
        raise HTTPException(status_code=400, detail="Calificación inválida (1–5)")
    task = get_task_or_404(db, task_id)
    task.calificacion = rating.calificacion
    commit_or_500(db, "Error al guardar calificación")
    db.refresh(task)
    return {
        "mensaje": "Calificación actualizada correctamente",
        "tarea": TaskResponse.model_validate(task),
    }

@router.put("/{task_id}/reasignar")
async def reassign_task(task_id: int, reassign: TaskReassign, db: Session = Depends(get_db)):
    task = get_task_or_404(db, task_id)
    task.reasignado_a = reassign.nueva_area
    task.reasignado_por = reassign.reasignado_por
    commit_or_500(db, "Error al reasignar tarea")
    db.refresh(task)
    logger.info(f"Task #{task_id} reassigned to {reassign.nueva_area}")
    return {"ok": True, "tarea": TaskResponse.model_validate(task)}
