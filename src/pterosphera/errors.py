"""Exception types raised by pterosphera geometry generation."""

from __future__ import annotations

from typing import Optional

__all__ = [
    "PterospheraError",
    "ConfigurationError",
    "TopologyError",
    "KernelError",
]


class PterospheraError(Exception):
    """Base class for every error raised by the generator."""


class ConfigurationError(PterospheraError, ValueError):
    """Out-of-domain numeric input.

    ``finger``, ``column`` and ``field`` identify the offending part of the
    configuration when known and are folded into the message.
    """

    def __init__(
        self,
        message: str,
        *,
        finger: Optional[object] = None,
        column: Optional[int] = None,
        field: Optional[str] = None,
    ) -> None:
        self.finger = finger
        self.column = column
        self.field = field
        self.reason = message
        super().__init__(self._format())

    def _format(self) -> str:
        where = []
        if self.finger is not None:
            where.append(f"finger {self.finger}")
        if self.column is not None:
            where.append(f"column {self.column}")
        if self.field is not None:
            where.append(f"field '{self.field}'")
        if not where:
            return self.reason
        return f"{', '.join(where)}: {self.reason}"


class TopologyError(PterospheraError, ValueError):
    """Point/face bookkeeping that cannot be reconciled while welding."""


class KernelError(PterospheraError, RuntimeError):
    """The solid kernel rejected degenerate input or produced no geometry."""
