"""fleetmerge: combine zipped vehicle-telemetry spreadsheet exports into single reports."""
__version__ = "0.1.0"

from fleetmerge.core.orchestrator import CombineResult, combine_reports

__all__ = ["CombineResult", "combine_reports", "__version__"]
