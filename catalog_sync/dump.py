"""Optional JSON dump sink for intermediate payloads."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

from .events import NULL_RECORDER, EventRecorder


class DumpSink(Protocol):
    """Side channel that persists a payload for later inspection."""

    def dump(self, data: Any, filename: str) -> Path | None: ...


class NullDumpSink:
    """Sink that persists nothing."""

    def dump(self, data: Any, filename: str) -> Path | None:
        return None


class JsonDumpSink:
    """Write payloads as pretty-printed JSON files under one directory.

    Write failures are reported through the recorder and never raised, so a
    read-only dump directory cannot break a sync run.
    """

    def __init__(self, directory: Path, *, recorder: EventRecorder = NULL_RECORDER) -> None:
        self.directory = directory
        self.recorder = recorder

    def dump(self, data: Any, filename: str) -> Path | None:
        path = self.directory / filename
        text = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        except OSError as exc:
            self.recorder.record(logging.WARNING, "dump_failed", path=str(path), error=str(exc))
            return None
        self.recorder.record(logging.DEBUG, "payload_dumped", path=str(path), bytes=len(text.encode("utf-8")))
        return path
