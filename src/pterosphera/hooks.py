"""Observer hooks called after each piece of geometry is generated.

Observers see the finished values and must not modify them; they exist so a
debugging or visualization tool can number points or colour elements
without the geometry code knowing about it.
"""

from __future__ import annotations

from typing import Any, List, Protocol, Tuple

__all__ = ["GenerationObserver", "NullObserver", "RecordingObserver"]


class GenerationObserver(Protocol):
    def on_element(self, element) -> None: ...

    def on_column(self, column, solid) -> None: ...

    def on_placement(self, placement) -> None: ...


class NullObserver:
    """Observer that ignores every event."""

    def on_element(self, element) -> None:
        pass

    def on_column(self, column, solid) -> None:
        pass

    def on_placement(self, placement) -> None:
        pass


class RecordingObserver:
    """Collects ``(event, payload)`` tuples in call order."""

    def __init__(self) -> None:
        self.events: List[Tuple[str, Any]] = []

    def on_element(self, element) -> None:
        self.events.append(("element", element))

    def on_column(self, column, solid) -> None:
        self.events.append(("column", (column, solid)))

    def on_placement(self, placement) -> None:
        self.events.append(("placement", placement))

    def of(self, kind: str) -> list:
        return [payload for event, payload in self.events if event == kind]
