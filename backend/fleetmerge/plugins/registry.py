from __future__ import annotations
from importlib import import_module
from importlib.metadata import entry_points
from typing import Any, Dict, List, Mapping, Type

from fleetmerge.common.logger import get_logger
from .api import Processor

log = get_logger()

PROCESSORS: Dict[str, Type[Processor]] = {}

BUILTIN_PROCESSORS = (
    "fleetmerge.proc.drop_columns",
    "fleetmerge.proc.time_fields",
)

_bootstrapped = False


# ---------------- Registration decorators ----------------
def register_processor(cls: Type[Processor]):
    """Decorator for processors to self-register."""
    PROCESSORS[cls.name] = cls
    return cls


# ---------------- Entry point discovery ----------------
def _discover_entrypoints(group: str) -> None:
    """Allow third-party packages to register processors via entry points."""
    for ep in entry_points().select(group=group):
        try:
            ep.load()  # importing triggers @register_processor
        except Exception as e:
            log.warning(f"Could not load processor plugin '{ep.name}': {e}")


def bootstrap_discovery() -> None:
    """Import built-in processors and discover external ones (once)."""
    global _bootstrapped
    if _bootstrapped:
        return
    for mod in BUILTIN_PROCESSORS:
        import_module(mod)
    _discover_entrypoints("fleetmerge.processors")
    _bootstrapped = True


# ---------------- Pickers ----------------
def get_applicable_processors(ctx: Mapping[str, Any]) -> List[Processor]:
    """Return instantiated processors that apply to this context, ordered by .order."""
    bootstrap_discovery()
    procs = []
    for cls in PROCESSORS.values():
        p = cls()
        if p.applies_to(ctx):
            procs.append(p)
    return sorted(procs, key=lambda p: getattr(p, "order", 100))
