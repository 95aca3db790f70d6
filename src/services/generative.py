import logging
from typing import Optional

from google import genai

from ..config.settings import GEMINI_API_KEY, GEMINI_MODEL
from ..monitoring.metrics import VENDOR_CALLS

logger = logging.getLogger(__name__)


class GenerationError(Exception):
    pass


class TextGenerator:
    """Envia um prompt fixo + texto livre ao Gemini e devolve o texto gerado."""

    def __init__(self, api_key: str = GEMINI_API_KEY, model: str = GEMINI_MODEL, client=None):
        self.model = model
        self._client = client
        self._api_key = api_key

    @property
    def client(self):
        if self._client is None:
            if not self._api_key:
                raise GenerationError("GEMINI_API_KEY not configured")
            self._client = genai.Client(api_key=self._api_key)
        return self._client

    def generate(self, prompt: str, text: Optional[str] = None) -> str:
        contents = [prompt] if text is None else [prompt, text]
        try:
            response = self.client.models.generate_content(model=self.model, contents=contents)
        except GenerationError:
            VENDOR_CALLS.labels(service="generative", outcome="error").inc()
            raise
        except Exception as e:
            VENDOR_CALLS.labels(service="generative", outcome="error").inc()
            raise GenerationError(str(e)) from e
        VENDOR_CALLS.labels(service="generative", outcome="ok").inc()
        out = (response.text or "").strip()
        logger.debug("generated %d chars with %s", len(out), self.model)
        return out
