#!/usr/bin/env python
"""
CLI for combining zipped telemetry exports
Usage: fleetmerge --stops stops.zip --work-times work_times.zip
"""
from __future__ import annotations

import argparse
import json
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from fleetmerge import __version__
from fleetmerge.common.config_models import CombinerConfig, config_to_dict, load_config_dict
from fleetmerge.common.logger import LogFormat, get_logger, init_logger
from fleetmerge.core.orchestrator import combine_reports


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fleetmerge",
        description="Combine zipped stops and work-times exports into two workbooks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  fleetmerge --stops stops.zip --work-times work_times.zip
  fleetmerge --stops stops.zip --work-times work_times.zip --output-dir ./out
  fleetmerge --stops stops.zip --work-times work_times.zip --set execution.sort_files=false
  fleetmerge --stops stops.zip --work-times work_times.zip --json
        """
    )
    parser.add_argument("--stops", required=True, help="Zip archive of stops report exports")
    parser.add_argument("--work-times", required=True, dest="work_times", help="Zip archive of work-times report exports")
    parser.add_argument("--config", help="YAML file merged over the built-in settings (optional)")
    parser.add_argument("--output-dir", dest="output_dir", help="Directory for the combined workbooks (default: Downloads)")
    parser.add_argument("--dotenv", help="Path to .env file to load (optional)")
    parser.add_argument(
        "--set",
        action="append",
        help="Override config with dotted.key=value (repeatable)"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate configuration and inputs without extracting anything"
    )
    parser.add_argument(
        "--log-level",
        choices=["user", "dev", "debug"],
        default="user",
        help="Logging verbosity: user (clean), dev (detailed), debug (very verbose)"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output logs in JSON-Lines format (for GUI integration)"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    t0 = time.perf_counter()
    args = build_parser().parse_args(argv)

    log_format = LogFormat.JSON if args.json else LogFormat.TEXT
    init_logger(args.log_level, log_format)
    log = get_logger()

    load_dotenv(args.dotenv) if args.dotenv else load_dotenv()

    try:
        raw = load_config_dict(Path(args.config) if args.config else None)
        for override in args.set or []:
            if "=" not in override:
                raise ValueError(f"--set expects dotted.key=value, got: {override}")
            key, value = override.split("=", 1)
            _set_dotted(raw, key.strip(), value)
        config = CombinerConfig(**raw)
    except (FileNotFoundError, ValueError, ValidationError) as e:
        log.reply({"success": False, "error": f"Invalid configuration: {e}"})
        return 1

    if args.dry_run:
        return _dry_run(args, config)

    result = combine_reports(args.stops, args.work_times, config, output_dir=args.output_dir)

    elapsed = time.perf_counter() - t0
    log.dev(f"Finished in {elapsed:.2f}s")
    log.reply(result.to_reply())
    return 0 if result.success else 1


def _dry_run(args: argparse.Namespace, config: CombinerConfig) -> int:
    log = get_logger()
    log.info("DRY RUN - validating inputs")
    log.dev(json.dumps(config_to_dict(config), indent=2))

    missing = [p for p in (args.stops, args.work_times) if not Path(p).is_file()]
    if missing:
        log.reply({"success": False, "error": f"Archive not found: {', '.join(missing)}"})
        return 1

    for key, category in config.categories.items():
        log.success(f"{key}: skip {category.header_skip} row(s), {len(category.time_columns)} time column(s)")
    log.reply({"success": True, "message": "Configuration and inputs look valid"})
    return 0


def _set_dotted(config: Dict[str, Any], dotted_key: str, value: str) -> None:
    """Set a value in nested dict using dotted notation"""
    # Parse value as YAML for proper types
    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError:
        parsed_value = value

    parts = dotted_key.split(".")
    current = config

    for part in parts[:-1]:
        if part not in current or not isinstance(current[part], dict):
            current[part] = {}
        current = current[part]

    current[parts[-1]] = parsed_value


if __name__ == "__main__":
    raise SystemExit(main())
