import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

from pydantic import ValidationError as ConfigError

from sampleseries.cli.visuals.runner import run_with_visuals
from sampleseries.config.resolution import cascade, resolve_log_level
from sampleseries.config.run import RunConfig, load_run_config
from sampleseries.diagnostics import configure_diagnostics
from sampleseries.pipeline.cycles import CycleRunner

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sampleseries",
        description="Build, validate and sum synthetic time series across concurrent cycles.",
    )
    parser.add_argument(
        "--config",
        "-c",
        help="path to a run.yaml with run settings",
    )
    parser.add_argument(
        "--cycles",
        help="number of cycles to run, or 'auto' (half the logical cores, 1..4)",
    )
    parser.add_argument(
        "--samples", "-n", type=int, default=None,
        help="samples generated per cycle",
    )
    parser.add_argument(
        "--start",
        help="ISO timestamp of the first sample",
    )
    parser.add_argument(
        "--interval",
        help="spacing between samples, e.g. 1m, 90s, 500ms",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="set logging level (default: INFO)",
    )
    parser.add_argument(
        "--log-dir",
        help="directory for application_log.txt",
    )
    parser.add_argument(
        "--visuals",
        choices=["auto", "tqdm", "rich", "off"],
        default=None,
        help="progress renderer: auto (default), tqdm, rich, or off",
    )
    return parser


def _cli_overrides(args: argparse.Namespace) -> dict:
    overrides = {
        "cycles": args.cycles,
        "samples_per_cycle": args.samples,
        "start_time": args.start,
        "interval": args.interval,
        "log_dir": args.log_dir,
        "visuals": args.visuals,
    }
    return {key: value for key, value in overrides.items() if value is not None}


def load_config(config_path: Optional[str], overrides: dict) -> RunConfig:
    config = load_run_config(Path(config_path)) if config_path else RunConfig()
    if not overrides:
        return config
    return RunConfig.model_validate({**config.model_dump(), **overrides})


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _build_parser().parse_args(argv)

    try:
        config = load_config(args.config, _cli_overrides(args))
    except ConfigError as exc:
        logger.error("Invalid run configuration:\n%s", exc)
        raise SystemExit(2)
    except (FileNotFoundError, TypeError, ValueError) as exc:
        logger.error("%s", exc)
        raise SystemExit(2)

    level = resolve_log_level(args.log_level, config.log_level)
    diagnostics = configure_diagnostics(
        level.value,
        log_dir=config.log_dir,
        log_file=config.log_file,
        fallback_file=config.fallback_log_file,
    )

    runner = CycleRunner(config, diagnostics=diagnostics)
    report = run_with_visuals(runner, visuals=cascade(args.visuals, config.visuals))

    failed = len(report.failed)
    if failed:
        logger.warning("%d of %d cycles failed", failed, len(report.results))
    print(
        f"{len(report.succeeded)}/{len(report.results)} cycles succeeded. "
        f"Total Elapsed Time: {report.elapsed_ms:,.2f} ms."
    )


if __name__ == "__main__":
    main()
