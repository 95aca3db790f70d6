# src/api/main.py
from contextlib import asynccontextmanager
from typing import Optional, List

import logging
import time
from urllib.parse import quote

from fastapi import FastAPI, File, Form, HTTPException, Query, Response, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.requests import Request
from starlette.responses import Response as StarletteResponse
from unidecode import unidecode

from ..config import settings
from ..data import repository as repo
from ..data.repository import NotFoundError, ValidationError
from ..data.schema import Vacancy, Candidate, InterviewTurn
from ..data.store import MongoStore, GridFSBlobStore
from ..interview.capture import CaptureRegistry, CaptureError, InterviewCapture
from ..monitoring.logs import configure_logging
from ..monitoring.metrics import REQUESTS, LATENCY
from ..services import summaries
from ..services.generative import TextGenerator, GenerationError
from ..services.pdf_text import extract_text_from_url, is_valid_url, ExtractionError
from ..services.speech import SpeechRecognizer, RecognitionError
from .schemas import (
    VacancyCreate,
    VacancyUpdate,
    VacancyStatus,
    VacancyOut,
    CandidateUpdate,
    CandidateOut,
    CvSummaryResponse,
    CaptureMode,
    CaptureState,
    RecordResponse,
    InterviewTurnOut,
    InterviewSummaryRequest,
    InterviewSummaryResponse,
)

logger = logging.getLogger(__name__)

# =========================
# Globals (clientes externos)
# =========================
_store = None
_blobs = None
_generator = None
_recognizer = None
_captures = CaptureRegistry()


def init_services():
    """Cria os clientes de armazenamento, fala e modelo generativo."""
    global _store, _blobs, _generator, _recognizer

    try:
        store = MongoStore.from_url(settings.MONGO_URL, settings.MONGO_DB)
        _store = store
        _blobs = GridFSBlobStore(store.db)
    except Exception:
        # sem banco o app sobe mesmo assim; /health mostra o estado
        logger.exception("could not initialise mongo client")

    _generator = TextGenerator()
    _recognizer = SpeechRecognizer()


# =========================
# App factory (lifespan)
# =========================
def _build_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.LOG_LEVEL)
        init_services()
        yield
        _captures.clear()

    app = FastAPI(title="Reclutamiento API", version="0.4.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return app


app = _build_app()


# =========================
# Middleware de métricas
# =========================
@app.middleware("http")
async def metrics_and_access_log(request: Request, call_next):
    start = time.perf_counter()
    path = request.url.path
    method = request.method
    status_code = 500
    try:
        response: StarletteResponse = await call_next(request)
        status_code = response.status_code
        # usa o template da rota (sem ids) como label
        route = request.scope.get("route")
        if route is not None:
            path = route.path
        return response
    finally:
        dur = time.perf_counter() - start
        try:
            LATENCY.labels(endpoint=path).observe(dur)
            REQUESTS.labels(endpoint=path, method=method, status=str(status_code)).inc()
        except Exception:
            # nunca quebre a requisição por falha de métrica
            pass


# =========================
# Erros de domínio -> HTTP
# =========================
@app.exception_handler(NotFoundError)
async def _not_found(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ValidationError)
async def _invalid(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(CaptureError)
async def _capture_rejected(request: Request, exc: CaptureError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


# =========================
# Helpers internos
# =========================
def _require_store():
    if _store is None:
        raise HTTPException(status_code=503, detail="Base de datos no disponible.")
    return _store


def _require_blobs():
    if _blobs is None:
        raise HTTPException(status_code=503, detail="Almacenamiento de archivos no disponible.")
    return _blobs


def _vacancy_out(v: Vacancy) -> VacancyOut:
    return VacancyOut(**v.__dict__)


def _turn_out(t: InterviewTurn) -> InterviewTurnOut:
    return InterviewTurnOut(id=t.id, question=t.question, response=t.response)


def _candidate_out(c: Candidate) -> CandidateOut:
    data = dict(c.__dict__)
    data["entrevista"] = [_turn_out(t) for t in c.entrevista]
    return CandidateOut(**data)


def _content_disposition(name: str) -> str:
    # headers saem em latin-1: nome ASCII de reserva + nome original em RFC 5987
    fallback = "".join(ch for ch in unidecode(name) if ch.isprintable() and ch not in '"\\') or "cv.pdf"
    return f"inline; filename=\"{fallback}\"; filename*=UTF-8''{quote(name, safe='')}"


def _capture_out(vacancy_id: str, candidate_id: str) -> CaptureState:
    cap = _captures.open(vacancy_id, candidate_id)
    return CaptureState(**cap.snapshot())


# =========================
# Endpoints operacionais
# =========================
@app.get("/health")
def health():
    return {
        "status": "ok",
        "store_connected": _store is not None,
        "generator_ready": _generator is not None,
        "speech_ready": _recognizer is not None,
        "open_captures": len(_captures),
    }


@app.get("/config")
def config():
    return {
        "gemini_model": settings.GEMINI_MODEL,
        "speech_language": settings.SPEECH_LANGUAGE,
        "min_cv_text_len": settings.MIN_CV_TEXT_LEN,
        "http_timeout": settings.HTTP_TIMEOUT,
    }


@app.get("/metrics")
def metrics():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


# =========================
# Extração de texto de PDF
# =========================
@app.get("/api/extract-pdf-text")
def extract_pdf_text(url: Optional[str] = None):
    if not is_valid_url(url):
        return JSONResponse(status_code=400, content={"error": "URL del PDF requerida."})
    try:
        text = extract_text_from_url(url)
    except ExtractionError:
        return JSONResponse(status_code=500, content={"error": "No se pudo extraer el texto del PDF."})
    return {"text": text}


@app.get("/files/{file_id}")
def download_file(file_id: str):
    stored = _require_blobs().get(file_id)
    if stored is None:
        raise HTTPException(status_code=404, detail="Archivo no encontrado.")
    name = stored.filename.rsplit("/", 1)[-1] or "cv.pdf"
    return Response(
        content=stored.data,
        media_type=stored.content_type,
        headers={"Content-Disposition": _content_disposition(name)},
    )


# =========================
# Vagas
# =========================
@app.get("/api/vacancies", response_model=List[VacancyOut])
def list_vacancies(estado: Optional[str] = None, q: Optional[str] = None):
    return [_vacancy_out(v) for v in repo.list_vacancies(_require_store(), estado=estado, search=q)]


@app.post("/api/vacancies", response_model=VacancyOut, status_code=201)
def create_vacancy(payload: VacancyCreate):
    return _vacancy_out(repo.create_vacancy(_require_store(), payload.puesto, payload.descripcion))


@app.get("/api/vacancies/{vacancy_id}", response_model=VacancyOut)
def get_vacancy(vacancy_id: str):
    return _vacancy_out(repo.get_vacancy(_require_store(), vacancy_id))


@app.patch("/api/vacancies/{vacancy_id}", response_model=VacancyOut)
def update_vacancy(vacancy_id: str, payload: VacancyUpdate):
    return _vacancy_out(
        repo.update_vacancy(_require_store(), vacancy_id, puesto=payload.puesto, descripcion=payload.descripcion)
    )


@app.post("/api/vacancies/{vacancy_id}/toggle", response_model=VacancyOut)
def toggle_vacancy(vacancy_id: str):
    return _vacancy_out(repo.toggle_vacancy_status(_require_store(), vacancy_id))


@app.put("/api/vacancies/{vacancy_id}/status", response_model=VacancyOut)
def set_vacancy_status(vacancy_id: str, payload: VacancyStatus):
    return _vacancy_out(repo.set_vacancy_status(_require_store(), vacancy_id, payload.estado))


@app.delete("/api/vacancies/{vacancy_id}", status_code=204)
def delete_vacancy(vacancy_id: str):
    repo.delete_vacancy(_require_store(), vacancy_id)
    return Response(status_code=204)


# =========================
# Candidatos
# =========================
@app.get("/api/vacancies/{vacancy_id}/candidates", response_model=List[CandidateOut])
def list_candidates(vacancy_id: str):
    store = _require_store()
    repo.get_vacancy(store, vacancy_id)
    return [_candidate_out(c) for c in repo.list_candidates(store, vacancy_id)]


@app.post("/api/vacancies/{vacancy_id}/candidates", response_model=CandidateOut, status_code=201)
def create_candidate(
    vacancy_id: str,
    nombre: str = Form(""),
    apellido: str = Form(""),
    correo: str = Form(""),
    telefono: str = Form(""),
    cv: Optional[UploadFile] = File(None),
):
    data = cv.file.read() if cv is not None else None
    cand = repo.create_candidate(
        _require_store(),
        _require_blobs(),
        vacancy_id,
        {"nombre": nombre, "apellido": apellido, "correo": correo, "telefono": telefono},
        cv_bytes=data,
        cv_filename=cv.filename if cv is not None else None,
        cv_content_type=cv.content_type if cv is not None else None,
        base_url=settings.PUBLIC_BASE_URL,
    )
    return _candidate_out(cand)


@app.get("/api/vacancies/{vacancy_id}/candidates/{candidate_id}", response_model=CandidateOut)
def get_candidate(vacancy_id: str, candidate_id: str):
    return _candidate_out(repo.get_candidate(_require_store(), vacancy_id, candidate_id))


@app.patch("/api/vacancies/{vacancy_id}/candidates/{candidate_id}", response_model=CandidateOut)
def update_candidate(vacancy_id: str, candidate_id: str, payload: CandidateUpdate):
    fields = payload.model_dump(exclude_none=True)
    return _candidate_out(repo.update_candidate(_require_store(), vacancy_id, candidate_id, fields))


@app.delete("/api/vacancies/{vacancy_id}/candidates/{candidate_id}", status_code=204)
def delete_candidate(vacancy_id: str, candidate_id: str):
    repo.delete_candidate(_require_store(), vacancy_id, candidate_id)
    _captures.close(vacancy_id, candidate_id)
    return Response(status_code=204)


@app.post(
    "/api/vacancies/{vacancy_id}/candidates/{candidate_id}/cv-summary",
    response_model=CvSummaryResponse,
)
def cv_summary(vacancy_id: str, candidate_id: str, refresh: bool = Query(False)):
    summary, cached = summaries.summarize_cv(
        _require_store(), _generator, vacancy_id, candidate_id, refresh=refresh
    )
    return CvSummaryResponse(summary=summary, cached=cached)


# =========================
# Captura de entrevista
# =========================
@app.get("/api/vacancies/{vacancy_id}/candidates/{candidate_id}/capture", response_model=CaptureState)
def capture_state(vacancy_id: str, candidate_id: str):
    repo.get_candidate(_require_store(), vacancy_id, candidate_id)
    return _capture_out(vacancy_id, candidate_id)


@app.delete("/api/vacancies/{vacancy_id}/candidates/{candidate_id}/capture", status_code=204)
def close_capture(vacancy_id: str, candidate_id: str):
    repo.get_candidate(_require_store(), vacancy_id, candidate_id)
    _captures.close(vacancy_id, candidate_id)
    return Response(status_code=204)


@app.post("/api/vacancies/{vacancy_id}/candidates/{candidate_id}/capture/mode", response_model=CaptureState)
def capture_mode(vacancy_id: str, candidate_id: str, payload: CaptureMode):
    repo.get_candidate(_require_store(), vacancy_id, candidate_id)
    _captures.open(vacancy_id, candidate_id).select(payload.mode)
    return _capture_out(vacancy_id, candidate_id)


@app.post("/api/vacancies/{vacancy_id}/candidates/{candidate_id}/capture/record", response_model=RecordResponse)
def capture_record(vacancy_id: str, candidate_id: str, audio: UploadFile = File(...)):
    store = _require_store()
    repo.get_candidate(store, vacancy_id, candidate_id)
    cap = _captures.open(vacancy_id, candidate_id)
    cap.check_can_record()

    if _recognizer is None:
        raise HTTPException(status_code=503, detail="Reconocimiento de voz no disponible.")
    try:
        text = _recognizer.recognize_once(audio.file.read())
    except RecognitionError as e:
        logger.warning(
            "recognition failed: %s", e,
            extra={"vacancy_id": vacancy_id, "candidate_id": candidate_id, "service": "speech"},
        )
        raise HTTPException(status_code=502, detail="No se pudo reconocer el audio.")

    turn = cap.apply(text)
    try:
        repo.save_turn(store, vacancy_id, candidate_id, turn)
    except Exception:
        # o turno continua em memória e entra no "Guardar entrevista"
        logger.exception(
            "could not persist interview turn",
            extra={"vacancy_id": vacancy_id, "candidate_id": candidate_id, "turn_id": turn.id},
        )
    return RecordResponse(turn=_turn_out(turn), capture=CaptureState(**cap.snapshot()))


@app.post("/api/vacancies/{vacancy_id}/candidates/{candidate_id}/capture/reset", response_model=CaptureState)
def capture_reset(vacancy_id: str, candidate_id: str):
    repo.get_candidate(_require_store(), vacancy_id, candidate_id)
    cap = _captures.get(vacancy_id, candidate_id)
    if cap is None:
        # nada gravado ainda; não abre sessão só para limpar
        return CaptureState(**InterviewCapture(vacancy_id, candidate_id).snapshot())
    cap.reset()
    return CaptureState(**cap.snapshot())


@app.post("/api/vacancies/{vacancy_id}/candidates/{candidate_id}/capture/save", response_model=List[InterviewTurnOut])
def capture_save(vacancy_id: str, candidate_id: str):
    cap = _captures.get(vacancy_id, candidate_id)
    turns = cap.turns if cap is not None else []
    repo.save_interview(_require_store(), vacancy_id, candidate_id, turns)
    return [_turn_out(t) for t in turns]


@app.post(
    "/api/vacancies/{vacancy_id}/candidates/{candidate_id}/capture/summary",
    response_model=InterviewSummaryResponse,
)
def capture_summary(vacancy_id: str, candidate_id: str, payload: InterviewSummaryRequest):
    cap = _captures.get(vacancy_id, candidate_id)
    turns = cap.turns if cap is not None else []
    if _generator is None:
        raise HTTPException(status_code=503, detail="Modelo generativo no disponible.")
    try:
        lines = summaries.summarize_interview(_generator, turns, style=payload.style)
    except GenerationError as e:
        logger.warning("interview summary failed: %s", e, extra={"candidate_id": candidate_id, "service": "generative"})
        raise HTTPException(status_code=502, detail="No se pudo generar el resumen.")
    return InterviewSummaryResponse(lines=lines)


@app.get(
    "/api/vacancies/{vacancy_id}/candidates/{candidate_id}/interview",
    response_model=List[InterviewTurnOut],
)
def saved_interview(vacancy_id: str, candidate_id: str):
    return [_turn_out(t) for t in repo.saved_interview(_require_store(), vacancy_id, candidate_id)]


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("src.api.main:app", host="0.0.0.0", port=8000, reload=False)
