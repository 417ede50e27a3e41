# src/smithy/domain/ports.py
from __future__ import annotations

from typing import Any, Protocol


# ----------------------------
# Diagnostics
# ----------------------------

class DiagnosticsSink(Protocol):
    """
    Receives one JSON-serializable snapshot per calculation.

    Must not block the engine. The engine swallows anything raised here,
    so implementations are free to be best-effort.
    """

    def record(self, snapshot: dict[str, Any]) -> None:
        ...
