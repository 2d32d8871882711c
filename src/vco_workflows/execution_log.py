"""Workflow execution logs."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)


class LogEntry(BaseModel):
    """One log line as reported by the server."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    timestamp: int | None = Field(default=None, alias="time-stamp")
    severity: str | None = None
    user: str | None = None
    origin: str | None = None
    short_description: str | None = Field(default=None, alias="short-description")
    long_description: str | None = Field(default=None, alias="long-description")

    def __str__(self) -> str:
        when = (
            datetime.fromtimestamp(self.timestamp / 1000, tz=UTC).isoformat()
            if self.timestamp is not None
            else "-"
        )
        text = self.short_description or ""
        if self.long_description and self.long_description != self.short_description:
            text = f"{text}: {self.long_description}" if text else self.long_description
        return f"{when} [{(self.severity or '').upper()}] {self.user or '-'}: {text}"


class WorkflowExecutionLog:
    """Log entries for one execution, oldest first."""

    def __init__(self, entries: list[LogEntry], json_content: str = "{}") -> None:
        self.entries = sorted(
            entries, key=lambda e: e.timestamp if e.timestamp is not None else 0
        )
        self.json_content = json_content

    @classmethod
    def from_json(cls, json_content: str) -> WorkflowExecutionLog:
        """Decode a log document. Malformed entries are logged and skipped."""

        raw = json.loads(json_content)
        logs = raw.get("logs") if isinstance(raw, dict) else None
        entries: list[LogEntry] = []
        for index, item in enumerate(logs or []):
            if not isinstance(item, dict) or not isinstance(item.get("entry"), dict):
                continue
            try:
                entries.append(LogEntry.model_validate(item["entry"]))
            except ValidationError as e:
                logger.warning(
                    "Ignoring malformed log entry",
                    extra={
                        "index": index,
                        "reason": str(e),
                        "source": json.dumps(item, default=str),
                    },
                )
        return cls(entries, json_content)

    def __len__(self) -> int:
        return len(self.entries)

    def __str__(self) -> str:
        return "".join(f"{entry}\n" for entry in self.entries)
