"""
Pydantic models for fleetmerge configuration

Provides type-safe, validated configuration for:
- Report categories (header skip, aliases, dropped columns, time columns)
- Execution policy (file ordering, failure handling, engines)
- Output and scratch locations
"""
from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from fleetmerge.common.utils import load_yaml


# ============================================================================
# Enums
# ============================================================================

class TimeEncoding(str, Enum):
    """How a time column is stored in the source export"""
    FRACTION_OF_DAY = "fraction_of_day"
    MINUTES = "minutes"


class NonNumericPolicy(str, Enum):
    """What to do with a time cell that is not a number"""
    KEEP = "keep"
    ZERO = "zero"


REQUIRED_CATEGORIES = ("stops", "work_times")

SPREADSHEET_PATTERNS = ["*.xlsx", "*.xlsm", "*.xls", "*.ods"]


# ============================================================================
# Category Models
# ============================================================================

class TimeColumnSpec(BaseModel):
    """A column rewritten to HH:MM:SS after combining"""
    column: str = Field(..., description="Column label in the combined table")
    encoding: TimeEncoding = Field(..., description="Source encoding of the value")
    non_numeric: NonNumericPolicy = Field(default=NonNumericPolicy.KEEP, description="Handling of non-numeric cells")


class CategoryConfig(BaseModel):
    """One report category (one archive in, one workbook out)"""
    name: str = Field(..., description="Display name, used for the output sheet")
    report_kind: str = Field(..., description="Output file name prefix")
    sheet_name: Optional[str] = Field(default=None, description="Output sheet name (defaults to name)")
    header_skip: int = Field(default=0, ge=0, description="Leading title rows before the header row")
    header_aliases: Dict[str, str] = Field(default_factory=dict, description="Raw header label -> display label")
    drop_columns: List[str] = Field(default_factory=list, description="Labels removed before writing")
    time_columns: List[TimeColumnSpec] = Field(default_factory=list, description="Columns normalized to HH:MM:SS")
    file_patterns: List[str] = Field(default_factory=lambda: list(SPREADSHEET_PATTERNS), description="Extracted names to combine")

    @field_validator("report_kind")
    @classmethod
    def validate_report_kind(cls, v: str) -> str:
        if not v or any(ch in v for ch in '/\\:'):
            raise ValueError(f"report_kind must be a plain file name prefix, got {v!r}")
        return v

    @property
    def output_sheet(self) -> str:
        return (self.sheet_name or self.name)[:31] or "Sheet1"


# ============================================================================
# Execution Models
# ============================================================================

class ExecutionPolicy(BaseModel):
    """Execution policy configuration"""
    sort_files: bool = Field(default=True, description="Process extracted files in name order")
    stop_on_extract_failure: bool = Field(default=True, description="Skip combining when any archive fails to unpack")
    engine_list: List[str] = Field(default_factory=lambda: ["calamine", "openpyxl"], description="pandas read_excel engines, in order")
    writer_engine: str = Field(default="openpyxl", description="pandas ExcelWriter engine")

    @field_validator("engine_list")
    @classmethod
    def validate_engine_list(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("engine_list needs at least one engine")
        return v


# ============================================================================
# Main Configuration Model
# ============================================================================

class CombinerConfig(BaseModel):
    """Complete fleetmerge configuration"""
    output_dir: Optional[str] = Field(default=None, description="Where workbooks are written; placeholders allowed")
    scratch_root: Optional[str] = Field(default=None, description="Parent of the per-run scratch area")
    execution: ExecutionPolicy = Field(default_factory=ExecutionPolicy, description="Execution policy")
    categories: Dict[str, CategoryConfig] = Field(..., description="Report categories by key")

    @model_validator(mode='after')
    def validate_categories(self) -> 'CombinerConfig':
        """Both report categories must be configured"""
        missing = [c for c in REQUIRED_CATEGORIES if c not in self.categories]
        if missing:
            raise ValueError(
                f"Missing report categories: {', '.join(missing)}. "
                f"Configured: {', '.join(sorted(self.categories)) or '(none)'}"
            )
        return self

    @model_validator(mode='after')
    def validate_report_kinds(self) -> 'CombinerConfig':
        """Output prefixes must differ or the two workbooks would collide"""
        kinds = [c.report_kind for c in self.categories.values()]
        if len(kinds) != len(set(kinds)):
            raise ValueError(f"report_kind values must be unique, got {kinds}")
        return self


# ============================================================================
# Defaults
# ============================================================================

def default_config_dict() -> Dict[str, Any]:
    """Built-in settings for the telemetry exports"""
    return {
        "output_dir": None,
        "scratch_root": None,
        "execution": {},
        "categories": {
            "stops": {
                "name": "Stops",
                "report_kind": "combinedStopsReport",
                "header_skip": 5,
                "time_columns": [
                    {"column": "Parking time", "encoding": "fraction_of_day"},
                    {"column": "Ignition on", "encoding": "fraction_of_day"},
                    {"column": "Engine on", "encoding": "fraction_of_day"},
                ],
            },
            "work_times": {
                "name": "Work Times",
                "report_kind": "combinedWorkTimesReport",
                "header_skip": 4,
                "header_aliases": {
                    "": "Date",
                    "_1": "Licence plate",
                    "_2": "Vehicle",
                    "_3": "Vehicle Title",
                    "_4": "Total Driving Time",
                },
                "drop_columns": ["Driving time_1", "Total Driving Time", "_5", "Distance_1"],
                "time_columns": [
                    {"column": "Excessive idling", "encoding": "minutes", "non_numeric": "zero"},
                ],
            },
        },
    }


def default_config() -> CombinerConfig:
    return CombinerConfig(**default_config_dict())


# ============================================================================
# Utility Functions
# ============================================================================

def merge_config(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep-merge override into a copy of base. Lists and scalars replace."""
    out = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = merge_config(out[key], value)
        else:
            out[key] = value
    return out


def load_config_dict(yaml_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Defaults, with the YAML file (if any) merged over them.

    Raises:
        FileNotFoundError: If yaml_path is given and doesn't exist
        ValueError: If the file isn't a YAML mapping
    """
    raw = default_config_dict()
    if yaml_path is None:
        return raw

    if not yaml_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {yaml_path}")

    loaded = load_yaml(yaml_path)
    if not isinstance(loaded, dict):
        raise ValueError(f"Configuration must be a mapping: {yaml_path}")

    return merge_config(raw, loaded)


def load_and_validate_config(yaml_path: Optional[Path] = None) -> CombinerConfig:
    """
    Load and validate configuration

    Raises:
        FileNotFoundError: If YAML file doesn't exist
        ValidationError: If configuration is invalid
    """
    return CombinerConfig(**load_config_dict(yaml_path))


def config_to_dict(config: CombinerConfig) -> Dict[str, Any]:
    return config.model_dump(mode='json', exclude_none=True)
