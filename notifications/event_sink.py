from __future__ import annotations

from dataclasses import asdict
from pathlib import Path
from typing import List, Protocol

import orjson

from common.config import EventsConfig, yaml_config
from common.logger import get_logger
from ingestion.document_models import ProgressEvent

log = get_logger(__name__)


class EventSink(Protocol):
    def emit(self, event: ProgressEvent) -> None: ...


class NullEventSink:
    def emit(self, event: ProgressEvent) -> None:
        return None


class LoggingEventSink:
    def emit(self, event: ProgressEvent) -> None:
        log.info(
            "[%s] %s (%d/%d) %s",
            event.repo_name,
            event.type,
            event.processed_files,
            event.total_files,
            event.message,
        )


class MemoryEventSink:
    """Keeps every event in order; handy for tests and in-process subscribers."""

    def __init__(self):
        self.events: List[ProgressEvent] = []

    def emit(self, event: ProgressEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type: str) -> List[ProgressEvent]:
        return [e for e in self.events if e.type == event_type]


class JsonlEventSink:
    """Appends one JSON object per event, for tailing by a push/SSE relay."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def emit(self, event: ProgressEvent) -> None:
        with self.path.open("ab") as f:
            f.write(orjson.dumps(asdict(event)) + b"\n")


def build_event_sink(cfg: EventsConfig | None = None) -> EventSink:
    cfg = cfg or yaml_config.events
    if cfg.sink == "none":
        return NullEventSink()
    if cfg.sink == "jsonl":
        return JsonlEventSink(cfg.jsonl_path)
    return LoggingEventSink()
