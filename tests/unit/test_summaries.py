from src.data import repository as repo
from src.data.schema import InterviewTurn
from src.data.store import CANDIDATES
from src.services import summaries
from src.services.prompts import CV_SUMMARY, CV_INSUFFICIENT, CV_FAILED, INTERVIEW_GENERAL, INTERVIEW_FALLBACK


def _setup(store, blobs):
    v = repo.create_vacancy(store, "Backend")
    c = repo.create_candidate(
        store, blobs, v.id,
        {"nombre": "Ana", "apellido": "García", "correo": "ana@example.com", "telefono": "600"},
        cv_bytes=b"%PDF", cv_filename="ana.pdf", cv_content_type="application/pdf",
        base_url="http://testserver",
    )
    return v, c


def _boom(url):
    raise AssertionError("extraction should not be called")


def test_cached_summary_skips_generation(store, blobs, generator):
    v, c = _setup(store, blobs)
    store.update(CANDIDATES, c.id, {"cvSummary": "Resumen previo"})

    text, cached = summaries.summarize_cv(store, generator, v.id, c.id, extract_text=_boom)

    assert text == "Resumen previo"
    assert cached is True
    assert generator.calls == []


def test_short_text_persists_insufficient_message(store, blobs, generator):
    v, c = _setup(store, blobs)

    text, cached = summaries.summarize_cv(store, generator, v.id, c.id, extract_text=lambda url: "  Ana \n García  ")

    assert text == CV_INSUFFICIENT
    assert cached is False
    assert generator.calls == []
    assert store.get(CANDIDATES, c.id)["cvSummary"] == CV_INSUFFICIENT


def test_generates_and_caches(store, blobs, generator):
    v, c = _setup(store, blobs)
    cv_text = "Ingeniera de software con ocho años de experiencia en Python y AWS."
    seen = []

    def extract(url):
        seen.append(url)
        return cv_text

    text, cached = summaries.summarize_cv(store, generator, v.id, c.id, extract_text=extract)

    assert text == "Resumen generado."
    assert cached is False
    assert seen == [c.cvUrl]
    assert generator.calls == [(CV_SUMMARY, cv_text)]
    assert store.get(CANDIDATES, c.id)["cvSummary"] == "Resumen generado."

    # segunda chamada vem do cache
    text2, cached2 = summaries.summarize_cv(store, generator, v.id, c.id, extract_text=_boom)
    assert (text2, cached2) == ("Resumen generado.", True)
    assert len(generator.calls) == 1


def test_refresh_overwrites_cache(store, blobs, generator):
    v, c = _setup(store, blobs)
    store.update(CANDIDATES, c.id, {"cvSummary": "viejo"})
    generator.reply = "nuevo"

    text, cached = summaries.summarize_cv(
        store, generator, v.id, c.id, refresh=True, extract_text=lambda url: "x" * 50
    )
    assert (text, cached) == ("nuevo", False)
    assert store.get(CANDIDATES, c.id)["cvSummary"] == "nuevo"


def test_failures_become_placeholder(store, blobs, generator):
    v, c = _setup(store, blobs)

    def broken(url):
        raise RuntimeError("download failed")

    text, cached = summaries.summarize_cv(store, generator, v.id, c.id, extract_text=broken)
    assert text == CV_FAILED
    assert store.get(CANDIDATES, c.id)["cvSummary"] == CV_FAILED


def test_generation_failure_becomes_placeholder(store, blobs):
    v, c = _setup(store, blobs)

    class Broken:
        def generate(self, prompt, text=None):
            raise RuntimeError("quota exceeded")

    text, _ = summaries.summarize_cv(store, Broken(), v.id, c.id, extract_text=lambda url: "x" * 100)
    assert text == CV_FAILED


def test_missing_cv_url_becomes_placeholder(store, blobs, generator):
    v, c = _setup(store, blobs)
    store.update(CANDIDATES, c.id, {"cvUrl": ""})
    text, _ = summaries.summarize_cv(store, generator, v.id, c.id, extract_text=_boom)
    assert text == CV_FAILED


def test_transcript_text_format():
    turns = [InterviewTurn(0, "¿Edad?", "30"), InterviewTurn(1, "¿Ciudad?", "Lima")]
    assert summaries.transcript_text(turns) == (
        "Pregunta: ¿Edad?\nRespuesta: 30\n\nPregunta: ¿Ciudad?\nRespuesta: Lima\n"
    )
    assert summaries.transcript_text([]) == ""


def test_summarize_interview_styles(generator):
    generator.reply = "línea 1\nlínea 2"
    turns = [InterviewTurn(0, "q", "r")]

    assert summaries.summarize_interview(generator, turns, style=0) == ["línea 1", "línea 2"]
    assert generator.calls[-1] == (INTERVIEW_GENERAL, "Pregunta: q\nRespuesta: r\n")

    summaries.summarize_interview(generator, turns, style=9)
    assert generator.calls[-1] == (INTERVIEW_FALLBACK, None)
