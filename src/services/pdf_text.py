import io
import logging
from urllib.parse import urlparse

import requests
from pypdf import PdfReader

from ..config.settings import HTTP_TIMEOUT
from ..monitoring.metrics import VENDOR_CALLS

logger = logging.getLogger(__name__)


class ExtractionError(Exception):
    pass


def is_valid_url(url) -> bool:
    if not url or not isinstance(url, str):
        return False
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def parse_pdf(file_bytes: bytes) -> str:
    reader = PdfReader(io.BytesIO(file_bytes))
    out = []
    for page in reader.pages:
        out.append(page.extract_text() or "")
    return "\n".join(out).strip()


def extract_text_from_url(url: str, timeout: float = HTTP_TIMEOUT) -> str:
    """Baixa o PDF em ``url`` e devolve o texto extraído."""
    if not is_valid_url(url):
        raise ExtractionError(f"invalid url: {url!r}")
    try:
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
        text = parse_pdf(resp.content)
    except Exception as e:
        VENDOR_CALLS.labels(service="pdf", outcome="error").inc()
        logger.warning("pdf extraction failed url=%s: %s", url, e)
        raise ExtractionError(str(e)) from e
    VENDOR_CALLS.labels(service="pdf", outcome="ok").inc()
    return text
