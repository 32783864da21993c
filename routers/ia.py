from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import Optional
from services.query_assistant import QueryAssistant
from dependencies import get_query_assistant


router = APIRouter(
    prefix="/api/ia",
    tags=["ia"]
)

# Fields are optional so that missing values reach the assistant's own
# validation and come back as 400 {error}
class QuestionInput(BaseModel):
    pregunta: Optional[str] = None
    sessionId: Optional[str] = None

class CorrectionInput(BaseModel):
    pregunta_original: Optional[str] = None
    correccion: Optional[str] = None
    sessionId: Optional[str] = None

class CorrectionUpdateInput(BaseModel):
    nuevaRespuesta: Optional[str] = None


@router.post("", status_code=200)
async def ask(
    question_input: QuestionInput,
    assistant: QueryAssistant = Depends(get_query_assistant)
):
    """Answer a natural-language question about the tasks"""
    answer = await assistant.answer(question_input.pregunta, question_input.sessionId)
    return {"respuesta": answer}

@router.post("/corregir", status_code=200)
async def submit_correction(
    correction: CorrectionInput,
    assistant: QueryAssistant = Depends(get_query_assistant)
):
    """Store a correction, updating the most similar logged question if any"""
    entry = assistant.submit_correction(
        correction.pregunta_original,
        correction.correccion,
        correction.sessionId
    )
    return {"mensaje": "Corrección guardada correctamente", "id": entry.id}

@router.put("/corregir/{entry_id}", status_code=200)
async def update_correction(
    entry_id: int,
    update: CorrectionUpdateInput,
    assistant: QueryAssistant = Depends(get_query_assistant)
):
    """Overwrite the correction of a logged question"""
    entry = assistant.update_correction(entry_id, update.nuevaRespuesta)
    return {"mensaje": "Corrección actualizada correctamente", "id": entry.id}
