from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Optional, Dict, Any, List

ESTADO_ABIERTA = "Abierta"
ESTADO_CERRADA = "Cerrada"
ESTADOS = (ESTADO_ABIERTA, ESTADO_CERRADA)


@dataclass
class Vacancy:
    id: str
    puesto: str
    descripcion: str = ""
    estado: str = ESTADO_ABIERTA
    candidatos: int = 0
    fechaCreacion: Optional[datetime] = None

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> "Vacancy":
        return cls(
            id=str(doc["_id"]),
            puesto=doc.get("puesto") or "",
            descripcion=doc.get("descripcion") or "",
            estado=doc.get("estado") or ESTADO_ABIERTA,
            candidatos=int(doc.get("candidatos") or 0),
            fechaCreacion=doc.get("fechaCreacion"),
        )


@dataclass
class InterviewTurn:
    id: int
    question: str
    response: str = ""

    def to_doc(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> "InterviewTurn":
        return cls(
            id=int(doc.get("id") or 0),
            question=doc.get("question") or "",
            response=doc.get("response") or "",
        )


@dataclass
class Candidate:
    id: str
    vacancy_id: str
    nombre: str
    apellido: str
    correo: str
    telefono: str
    cvUrl: str = ""
    cvSummary: Optional[str] = None
    entrevista: List[InterviewTurn] = field(default_factory=list)

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> "Candidate":
        turns = doc.get("entrevista")
        return cls(
            id=str(doc["_id"]),
            vacancy_id=str(doc.get("vacancy_id") or ""),
            nombre=doc.get("nombre") or "",
            apellido=doc.get("apellido") or "",
            correo=doc.get("correo") or "",
            telefono=doc.get("telefono") or "",
            cvUrl=doc.get("cvUrl") or "",
            cvSummary=doc.get("cvSummary"),
            entrevista=[InterviewTurn.from_doc(t) for t in turns] if isinstance(turns, list) else [],
        )
