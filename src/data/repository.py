# src/data/repository.py
"""
Operações de vagas, candidatos e entrevistas sobre o armazenamento.

Nenhuma integridade referencial é garantida: apagar uma vaga não apaga os
candidatos dela, e toda escrita segue "a última vence".
"""
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List
import logging
import time

from .schema import (
    Vacancy,
    Candidate,
    InterviewTurn,
    ESTADO_ABIERTA,
    ESTADO_CERRADA,
    ESTADOS,
)
from .store import VACANCIES, CANDIDATES, INTERVIEWS
from ..features.text_clean import matches_query

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"


class NotFoundError(Exception):
    pass


class ValidationError(ValueError):
    pass


# =========================
# Vagas
# =========================
def create_vacancy(store, puesto: str, descripcion: Optional[str] = "") -> Vacancy:
    if not puesto or not puesto.strip():
        raise ValidationError("El nombre del puesto es obligatorio.")
    doc = {
        "puesto": puesto.strip(),
        "descripcion": descripcion or "",
        "estado": ESTADO_ABIERTA,
        "candidatos": 0,
        "fechaCreacion": datetime.now(timezone.utc),
    }
    doc["_id"] = store.insert(VACANCIES, doc)
    logger.info("vacancy created id=%s", doc["_id"])
    return Vacancy.from_doc(doc)


def get_vacancy(store, vacancy_id: str) -> Vacancy:
    doc = store.get(VACANCIES, vacancy_id)
    if doc is None:
        raise NotFoundError(f"Vacante {vacancy_id} no encontrada.")
    return Vacancy.from_doc(doc)


def list_vacancies(store, estado: Optional[str] = None, search: Optional[str] = None) -> List[Vacancy]:
    filt: Dict[str, Any] = {}
    if estado and estado != "all":
        filt["estado"] = estado
    docs = store.find(VACANCIES, filt, sort=[("fechaCreacion", -1)])
    out = [Vacancy.from_doc(d) for d in docs]
    if search:
        out = [v for v in out if matches_query(search, v.puesto, v.descripcion)]
    return out


def update_vacancy(
    store,
    vacancy_id: str,
    puesto: Optional[str] = None,
    descripcion: Optional[str] = None,
) -> Vacancy:
    fields: Dict[str, Any] = {}
    if puesto is not None:
        if not puesto.strip():
            raise ValidationError("El nombre del puesto es obligatorio.")
        fields["puesto"] = puesto.strip()
    if descripcion is not None:
        fields["descripcion"] = descripcion
    if fields and not store.update(VACANCIES, vacancy_id, fields):
        raise NotFoundError(f"Vacante {vacancy_id} no encontrada.")
    return get_vacancy(store, vacancy_id)


def set_vacancy_status(store, vacancy_id: str, estado: str) -> Vacancy:
    if estado not in ESTADOS:
        raise ValidationError(f"Estado inválido: {estado}")
    if not store.update(VACANCIES, vacancy_id, {"estado": estado}):
        raise NotFoundError(f"Vacante {vacancy_id} no encontrada.")
    return get_vacancy(store, vacancy_id)


def toggle_vacancy_status(store, vacancy_id: str) -> Vacancy:
    current = get_vacancy(store, vacancy_id)
    nuevo = ESTADO_CERRADA if current.estado == ESTADO_ABIERTA else ESTADO_ABIERTA
    return set_vacancy_status(store, vacancy_id, nuevo)


def delete_vacancy(store, vacancy_id: str) -> None:
    if not store.delete(VACANCIES, vacancy_id):
        raise NotFoundError(f"Vacante {vacancy_id} no encontrada.")
    logger.info("vacancy deleted id=%s", vacancy_id)


# =========================
# Candidatos
# =========================
def is_pdf(filename: Optional[str], content_type: Optional[str]) -> bool:
    if content_type == PDF_CONTENT_TYPE:
        return True
    return bool(filename) and filename.lower().endswith(".pdf")


def cv_storage_path(vacancy_id: str, filename: str, now_ms: Optional[int] = None) -> str:
    ts = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"cvs/{vacancy_id}/{ts}_{filename}"


def create_candidate(
    store,
    blobs,
    vacancy_id: str,
    data: Dict[str, str],
    cv_bytes: Optional[bytes],
    cv_filename: Optional[str],
    cv_content_type: Optional[str],
    base_url: str,
) -> Candidate:
    """Sobe o CV, grava o candidato e incrementa o contador da vaga."""
    get_vacancy(store, vacancy_id)

    for key in ("nombre", "apellido", "correo", "telefono"):
        if not (data.get(key) or "").strip():
            raise ValidationError(f"El campo {key} es obligatorio.")
    if not cv_bytes:
        raise ValidationError("El archivo del CV es obligatorio.")
    if not is_pdf(cv_filename, cv_content_type):
        raise ValidationError("Por favor, selecciona un archivo PDF.")

    path = cv_storage_path(vacancy_id, cv_filename or "cv.pdf")
    file_id = blobs.put(path, cv_bytes, PDF_CONTENT_TYPE)
    doc = {
        "vacancy_id": vacancy_id,
        "nombre": data["nombre"].strip(),
        "apellido": data["apellido"].strip(),
        "correo": data["correo"].strip(),
        "telefono": data["telefono"].strip(),
        "cvUrl": f"{base_url}/files/{file_id}",
    }
    doc["_id"] = store.insert(CANDIDATES, doc)
    store.increment(VACANCIES, vacancy_id, "candidatos", 1)
    logger.info("candidate created id=%s vacancy=%s", doc["_id"], vacancy_id)
    return Candidate.from_doc(doc)


def get_candidate(store, vacancy_id: str, candidate_id: str) -> Candidate:
    doc = store.get(CANDIDATES, candidate_id)
    if doc is None or str(doc.get("vacancy_id")) != vacancy_id:
        raise NotFoundError(f"Candidato {candidate_id} no encontrado.")
    return Candidate.from_doc(doc)


def list_candidates(store, vacancy_id: str) -> List[Candidate]:
    docs = store.find(CANDIDATES, {"vacancy_id": vacancy_id}, sort=[("apellido", 1), ("nombre", 1)])
    return [Candidate.from_doc(d) for d in docs]


def update_candidate(store, vacancy_id: str, candidate_id: str, fields: Dict[str, Optional[str]]) -> Candidate:
    get_candidate(store, vacancy_id, candidate_id)
    changes = {}
    for key in ("nombre", "apellido", "correo", "telefono"):
        v = fields.get(key)
        if v is None:
            continue
        if not v.strip():
            raise ValidationError(f"El campo {key} es obligatorio.")
        changes[key] = v.strip()
    if changes:
        store.update(CANDIDATES, candidate_id, changes)
    return get_candidate(store, vacancy_id, candidate_id)


def delete_candidate(store, vacancy_id: str, candidate_id: str) -> None:
    get_candidate(store, vacancy_id, candidate_id)
    store.delete(CANDIDATES, candidate_id)
    store.increment(VACANCIES, vacancy_id, "candidatos", -1)
    logger.info("candidate deleted id=%s vacancy=%s", candidate_id, vacancy_id)


def set_cv_summary(store, candidate_id: str, summary: str) -> None:
    store.update(CANDIDATES, candidate_id, {"cvSummary": summary})


# =========================
# Entrevistas
# =========================
def _turn_doc_id(vacancy_id: str, candidate_id: str, turn_id: int) -> str:
    return f"{vacancy_id}:{candidate_id}:{turn_id}"


def save_turn(store, vacancy_id: str, candidate_id: str, turn: InterviewTurn) -> None:
    doc = turn.to_doc()
    doc.update({"vacancy_id": vacancy_id, "candidate_id": candidate_id})
    store.upsert(INTERVIEWS, _turn_doc_id(vacancy_id, candidate_id, turn.id), doc)


def save_interview(store, vacancy_id: str, candidate_id: str, turns: List[InterviewTurn]) -> None:
    if not turns:
        raise ValidationError("No hay información para guardar.")
    get_candidate(store, vacancy_id, candidate_id)
    store.update(CANDIDATES, candidate_id, {"entrevista": [t.to_doc() for t in turns]})


def saved_interview(store, vacancy_id: str, candidate_id: str) -> List[InterviewTurn]:
    """Q&A gravadas no candidato; lista vazia se não houver."""
    try:
        return get_candidate(store, vacancy_id, candidate_id).entrevista
    except NotFoundError:
        return []
