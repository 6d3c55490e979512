from __future__ import annotations
from typing import Any, Mapping

from fleetmerge.common.config_models import CategoryConfig
from fleetmerge.common.logger import get_logger
from fleetmerge.core.table import Table
from fleetmerge.plugins.api import Processor
from fleetmerge.plugins.registry import register_processor

log = get_logger()


@register_processor
class DropColumns(Processor):
    """
    Remove duplicate or irrelevant columns before writing.

    Options (ctx["category"].drop_columns): labels to remove; absent labels are ignored.
    """
    name = "drop_columns"
    order = 20

    def applies_to(self, ctx: Mapping[str, Any]) -> bool:
        category: CategoryConfig | None = ctx.get("category")
        return bool(category and category.drop_columns)

    def process(self, table: Table, ctx: Mapping[str, Any]) -> Table:
        category: CategoryConfig = ctx["category"]
        dropped = table.drop(category.drop_columns)
        if dropped:
            log.dev(f"    Dropped column(s): {dropped}")
        return table
