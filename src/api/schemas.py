from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field, field_validator


def _coerce_str(v):
    if v is None: return ""
    return v  # pydantic ainda pode converter para str se necessário


class VacancyCreate(BaseModel):
    puesto: str = ""
    descripcion: Optional[str] = ""

    @field_validator("puesto", "descripcion", mode="before")
    @classmethod
    def _clean(cls, v): return _coerce_str(v)


class VacancyUpdate(BaseModel):
    puesto: Optional[str] = None
    descripcion: Optional[str] = None


class VacancyStatus(BaseModel):
    estado: str


class VacancyOut(BaseModel):
    id: str
    puesto: str
    descripcion: str = ""
    estado: str
    candidatos: int = Field(0, ge=0)
    fechaCreacion: Optional[datetime] = None


class CandidateUpdate(BaseModel):
    nombre: Optional[str] = None
    apellido: Optional[str] = None
    correo: Optional[str] = None
    telefono: Optional[str] = None


class InterviewTurnOut(BaseModel):
    id: int
    question: str
    response: str = ""


class CandidateOut(BaseModel):
    id: str
    vacancy_id: str
    nombre: str
    apellido: str
    correo: str
    telefono: str
    cvUrl: str = ""
    cvSummary: Optional[str] = None
    entrevista: List[InterviewTurnOut] = Field(default_factory=list)


class CvSummaryResponse(BaseModel):
    summary: str
    cached: bool


class CaptureMode(BaseModel):
    mode: str


class CaptureState(BaseModel):
    vacancy_id: str
    candidate_id: str
    state: str
    active: str
    question_recorded: bool
    counter: int
    turns: List[InterviewTurnOut]


class RecordResponse(BaseModel):
    turn: InterviewTurnOut
    capture: CaptureState


class InterviewSummaryRequest(BaseModel):
    style: int = 0


class InterviewSummaryResponse(BaseModel):
    lines: List[str]
