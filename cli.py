"""CLI entry point for the average route pipeline.

Reads the historical routes CSV, computes the average route and writes it as
GeoJSON next to the input file, with settings taken from the YAML config.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

from average_route.config import get_nested, load_config
from average_route.errors import AverageRouteError
from average_route.pipeline import PipelineSettings, run

DEFAULT_INPUT_CSV = "data/DEBRV_DEHAM_historical_routes.csv"
DEFAULT_OUTPUT_FILENAME = "DEBRV_DEHAM_avg_route.geojson"


def configure_logging(log_cfg: Dict[str, object]) -> None:
    """Configure root logger with both file and console handlers."""

    log_dir = Path(log_cfg.get("dir", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)
    filename = log_cfg.get("filename", "average_route.log")
    log_path = log_dir / filename
    level_name = str(log_cfg.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s - %(levelname)s - %(message)s"
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)

    file_handler = logging.FileHandler(log_path, mode="w", encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(fmt))
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(fmt))

    root.addHandler(file_handler)
    root.addHandler(stream_handler)
    root.info("Logging to %s (level=%s)", log_path, level_name)


def resolve_paths(cfg: Dict[str, object], input_path: Optional[str], output_path: Optional[str]) -> tuple[Path, Path]:
    """Input from CLI or config; output defaults to a fixed filename beside the input."""

    csv_path = Path(input_path or get_nested(cfg, ["input", "csv_path"], DEFAULT_INPUT_CSV))
    if output_path:
        return csv_path, Path(output_path)
    filename = get_nested(cfg, ["output", "filename"], DEFAULT_OUTPUT_FILENAME)
    return csv_path, csv_path.parent / filename


def main(config_path: str = "config/average_route.yaml", input_path: Optional[str] = None, output_path: Optional[str] = None) -> int:
    cfg = load_config(config_path)
    configure_logging(cfg.get("logging", {}) or {})

    csv_path, geojson_path = resolve_paths(cfg, input_path, output_path)
    settings = PipelineSettings.from_config(cfg)
    try:
        result = run(csv_path, geojson_path, settings)
    except (AverageRouteError, OSError) as exc:
        logging.error("Average route calculation failed for %s: %s", csv_path, exc)
        return 1

    logging.info(
        "Average route: %d points from %d of %d routes (%d iterations, converged=%s)",
        len(result.route),
        result.clustered_routes,
        result.total_routes,
        result.iterations,
        result.converged,
    )
    return 0


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Average route derivation from historical vessel routes.")
    parser.add_argument(
        "-c",
        "--config",
        default="config/average_route.yaml",
        help="Path to YAML config file.",
    )
    parser.add_argument("--input", default=None, help="Historical routes CSV (overrides config).")
    parser.add_argument("--output", default=None, help="GeoJSON output path (defaults to beside the input).")
    return parser.parse_args(argv)


if __name__ == "__main__":
    args = parse_args()
    sys.exit(main(args.config, args.input, args.output))
