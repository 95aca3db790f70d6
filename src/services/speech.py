import logging

from google.cloud.speech_v2 import SpeechClient
from google.cloud.speech_v2.types import cloud_speech

from ..config.settings import GOOGLE_CLOUD_PROJECT, SPEECH_LANGUAGE, STT_MODEL
from ..monitoring.metrics import VENDOR_CALLS

logger = logging.getLogger(__name__)


class RecognitionError(Exception):
    pass


class SpeechRecognizer:
    """Reconhecimento de uma única fala (Speech-to-Text v2, idioma fixo)."""

    def __init__(
        self,
        project_id: str = GOOGLE_CLOUD_PROJECT,
        language: str = SPEECH_LANGUAGE,
        model: str = STT_MODEL,
        client=None,
    ):
        self.project_id = project_id
        self.language = language
        self.model = model
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = SpeechClient()
        return self._client

    def _request(self, audio: bytes):
        return cloud_speech.RecognizeRequest(
            recognizer=f"projects/{self.project_id}/locations/global/recognizers/_",
            config=cloud_speech.RecognitionConfig(
                auto_decoding_config=cloud_speech.AutoDetectDecodingConfig(),
                language_codes=[self.language],
                model=self.model,
            ),
            content=audio,
        )

    def recognize_once(self, audio: bytes) -> str:
        if not self.project_id:
            raise RecognitionError("GOOGLE_CLOUD_PROJECT is not set")
        if not audio:
            raise RecognitionError("empty audio")
        try:
            response = self.client.recognize(request=self._request(audio))
        except Exception as e:
            VENDOR_CALLS.labels(service="speech", outcome="error").inc()
            logger.warning("speech recognition failed: %s", e)
            raise RecognitionError(str(e)) from e

        parts = [r.alternatives[0].transcript for r in response.results if r.alternatives]
        text = " ".join(parts).strip()
        if not text:
            VENDOR_CALLS.labels(service="speech", outcome="error").inc()
            raise RecognitionError("no speech could be recognized")
        VENDOR_CALLS.labels(service="speech", outcome="ok").inc()
        return text
