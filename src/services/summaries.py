# src/services/summaries.py
import logging
from typing import Callable, List, Optional, Tuple

from ..config.settings import MIN_CV_TEXT_LEN
from ..data import repository as repo
from ..data.schema import InterviewTurn
from ..features.text_clean import compact_text
from .pdf_text import extract_text_from_url
from .prompts import (
    CV_SUMMARY,
    CV_INSUFFICIENT,
    CV_FAILED,
    INTERVIEW_STYLES,
    INTERVIEW_FALLBACK,
)

logger = logging.getLogger(__name__)


def summarize_cv(
    store,
    generator,
    vacancy_id: str,
    candidate_id: str,
    refresh: bool = False,
    extract_text: Optional[Callable[[str], str]] = None,
    min_len: Optional[int] = None,
) -> Tuple[str, bool]:
    """
    Resumo do CV do candidato, com cache em ``cvSummary``.

    Retorna ``(texto, veio_do_cache)``. Falhas de download, extração ou
    geração viram um texto fixo gravado no candidato; nada é relançado.
    """
    min_len = MIN_CV_TEXT_LEN if min_len is None else min_len
    extract_text = extract_text or extract_text_from_url
    cand = repo.get_candidate(store, vacancy_id, candidate_id)
    if cand.cvSummary and not refresh:
        return cand.cvSummary, True

    try:
        if not cand.cvUrl:
            raise ValueError("candidate has no cvUrl")
        text = compact_text(extract_text(cand.cvUrl))
        if len(text) < min_len:
            summary = CV_INSUFFICIENT
        else:
            summary = generator.generate(CV_SUMMARY, text) or CV_FAILED
    except Exception:
        logger.exception("cv summary failed", extra={"vacancy_id": vacancy_id, "candidate_id": candidate_id})
        summary = CV_FAILED

    repo.set_cv_summary(store, candidate_id, summary)
    return summary, False


def transcript_text(turns: List[InterviewTurn]) -> str:
    if not turns:
        return ""
    return "\n".join(f"Pregunta: {t.question}\nRespuesta: {t.response}\n" for t in turns)


def summarize_interview(generator, turns: List[InterviewTurn], style: int = 0) -> List[str]:
    prompt = INTERVIEW_STYLES.get(style)
    if prompt is None:
        text = generator.generate(INTERVIEW_FALLBACK)
    else:
        text = generator.generate(prompt, transcript_text(turns))
    return text.split("\n")
