# src/smithy/adapters/diagnostics.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from smithy.adapters.config import AppConfig
from smithy.adapters.logging_utils import get_logger, log_context
from smithy.domain.ports import DiagnosticsSink

logger = get_logger(__name__)


@dataclass
class NullDiagnosticsSink:
    """Drops every snapshot. Default for tests."""

    def record(self, snapshot: dict[str, Any]) -> None:
        return None


@dataclass
class LoggingDiagnosticsSink:
    """Emits the snapshot as one JSON log line."""

    level: str = "INFO"

    def record(self, snapshot: dict[str, Any]) -> None:
        logger.log(
            logging.getLevelName(self.level.upper()),
            "calculation_snapshot",
            extra=log_context(snapshot=snapshot),
        )


@dataclass
class JsonFileDiagnosticsSink:
    """
    Overwrites ``path`` with the latest snapshot, pretty-printed.

    The write happens synchronously inside the calculation call, so this
    sink is opt-in (``SMITHY_DIAGNOSTICS_SINK=file``) and meant for local
    debugging rather than a serving process.
    """

    path: Path = field(default_factory=lambda: Path("smithy-debug.log"))

    def record(self, snapshot: dict[str, Any]) -> None:
        self.path.write_text(json.dumps(snapshot, indent=2, default=float), encoding="utf-8")


def build_diagnostics_sink(cfg: AppConfig) -> DiagnosticsSink:
    if cfg.DIAGNOSTICS_SINK == "file":
        return JsonFileDiagnosticsSink(path=Path(cfg.DIAGNOSTICS_PATH))
    if cfg.DIAGNOSTICS_SINK == "null":
        return NullDiagnosticsSink()
    return LoggingDiagnosticsSink()
