from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Mapping

from fleetmerge.core.table import Table


class Processor(ABC):
    """Transforms a combined Table -> Table after reconciliation."""
    name: str
    order: int = 100

    @abstractmethod
    def applies_to(self, ctx: Mapping[str, Any]) -> bool:
        ...

    @abstractmethod
    def process(self, table: Table, ctx: Mapping[str, Any]) -> Table:
        ...
