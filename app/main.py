import logging

from fastapi import FastAPI

from app.api.webhooks import router as webhooks_router
from app.core.config import settings

# Context keys passed through `extra=` that are appended to every log line
LOG_CONTEXT_KEYS = (
    "message_id",
    "identifier",
    "phase",
    "next_phase",
    "booking_id",
    "kind",
    "message_count",
    "status",
    "attempt",
    "reason",
    "error",
)


class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        extras = [
            f"{key}={getattr(record, key)}"
            for key in LOG_CONTEXT_KEYS
            if getattr(record, key, None) not in (None, "")
        ]
        return f"{base} | {' '.join(extras)}" if extras else base


def configure_logging(level: str) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(ContextFormatter("%(asctime)s %(levelname)s:%(name)s:%(message)s"))

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()
    root.addHandler(handler)


configure_logging(settings.LOG_LEVEL)

app = FastAPI(title="Venue & Farm Booking Bot", version="1.0.0")
app.include_router(webhooks_router, tags=["webhooks"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
