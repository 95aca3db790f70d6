import json
import logging
import sys

# campos passados via ``extra=`` que vão para o JSON quando presentes
CONTEXT_FIELDS = ("vacancy_id", "candidate_id", "turn_id", "service")


class JsonFormatter(logging.Formatter):
    """Uma linha JSON por registro (stdout do container)."""

    def format(self, record):
        data = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                data[key] = value
        if record.exc_info:
            data["error"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False, default=str)


def configure_logging(level: str = "INFO") -> logging.Logger:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    logging.basicConfig(level=level.upper(), handlers=[handler], force=True)
    # o cliente http das SDKs do Google é muito verboso em DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    return logging.getLogger("reclutamiento")
