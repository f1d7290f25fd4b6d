"""
Per-run analysis state kept beside the tree instead of on it.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Dict, Optional

from bs4 import Tag

if TYPE_CHECKING:
    from decruft.config.config import ExtractionConfig


@dataclass(slots=True, frozen=True)
class ExtractionFlags:
    """The three passes a grab attempt can switch off."""

    strip_unlikelys: bool = True
    weight_classes: bool = True
    clean_conditionally: bool = True

    @classmethod
    def from_config(cls, config: ExtractionConfig) -> ExtractionFlags:
        return cls(
            strip_unlikelys=config.strip_unlikelys,
            weight_classes=config.weight_classes,
            clean_conditionally=config.clean_conditionally,
        )

    def relaxed(self) -> Optional[ExtractionFlags]:
        """Flags for the next retry, or None once everything is off."""
        if self.strip_unlikelys:
            return replace(self, strip_unlikelys=False)
        if self.weight_classes:
            return replace(self, weight_classes=False)
        if self.clean_conditionally:
            return replace(self, clean_conditionally=False)
        return None


@dataclass(slots=True)
class NodeState:
    node: Tag
    content_score: float = 0.0
    initialized: bool = False
    is_data_table: bool = False


class AnalysisState:
    """Side table of NodeState entries keyed by node identity.

    Entries hold a reference to their node so an ``id()`` is never reused for a
    different node while the table is alive.
    """

    def __init__(self) -> None:
        self._entries: Dict[int, NodeState] = {}

    def __contains__(self, node: object) -> bool:
        return id(node) in self._entries

    def get(self, node: Tag) -> NodeState:
        entry = self._entries.get(id(node))
        if entry is None:
            entry = NodeState(node=node)
            self._entries[id(node)] = entry
        return entry

    def peek(self, node: Tag) -> Optional[NodeState]:
        return self._entries.get(id(node))

    def is_initialized(self, node: Tag) -> bool:
        entry = self.peek(node)
        return entry is not None and entry.initialized

    def score(self, node: Tag) -> float:
        entry = self.peek(node)
        return entry.content_score if entry is not None else 0.0

    def set_score(self, node: Tag, score: float) -> None:
        self.get(node).content_score = score

    def mark_data_table(self, node: Tag, value: bool) -> None:
        self.get(node).is_data_table = value

    def is_data_table(self, node: Tag) -> bool:
        entry = self.peek(node)
        return entry is not None and entry.is_data_table
