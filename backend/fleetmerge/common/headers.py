from __future__ import annotations

from datetime import date, datetime, time
from typing import Any, Dict, List, Mapping, Optional

__all__ = [
    "header_text",
    "make_unique_headers",
    "apply_aliases",
]

def header_text(value: Any) -> str:
    """Render a header cell the way it reads in the sheet. Blank cells give ''."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, (date, time)):
        return value.isoformat()
    return str(value)

def make_unique_headers(headers: List[str]) -> List[str]:
    """
    Suffix repeated labels with _1, _2, ... in order of appearance.

    ["", "", "Distance", "Distance"] -> ["", "_1", "Distance", "Distance_1"]
    A suffix already used by another label is skipped.
    """
    seen: Dict[str, int] = {}
    out: List[str] = []
    for h in headers:
        cnt = seen.get(h, 0)
        if not cnt:
            seen[h] = 1
            out.append(h)
            continue
        candidate = f"{h}_{cnt}"
        cnt += 1
        while candidate in seen:
            candidate = f"{h}_{cnt}"
            cnt += 1
        seen[h] = cnt
        seen[candidate] = 1
        out.append(candidate)
    return out

def apply_aliases(labels: List[str], alias_map: Optional[Mapping[str, str]]) -> List[str]:
    """Rename labels through alias_map; unmapped labels pass through unchanged."""
    if not alias_map:
        return list(labels)
    return [alias_map.get(label, label) for label in labels]
