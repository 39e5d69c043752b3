"""
main.py — Tender Performance Report Generator — CLI Entry Point.

Loads a report payload (the JSON returned by the tender analytics API), then
runs the stages in memory: payload -> metrics -> narrative -> PDF.

Usage:
    python main.py --payload data/sample/report.json
    python main.py --payload report.json --sections executive_summary,recent_wins
    python main.py --payload report.json --output out/report.pdf --log-level DEBUG
    python main.py --list-sections

Outputs (data/output/):
    tender_report_{seller}_{date}.pdf   — multi-page performance report
"""

import argparse
import logging
import logging.handlers
import os
import sys
from datetime import datetime
from pathlib import Path

import yaml


def _configure_logging(log_dir: str = "logs", level: str = "INFO") -> None:
    """Configure rotating file handler + stream handler.

    Args:
        log_dir: Directory for log files.
        level: Log level string.
    """
    effective_level = os.environ.get("LOG_LEVEL", level).upper()
    numeric = getattr(logging, effective_level, logging.INFO)

    Path(log_dir).mkdir(parents=True, exist_ok=True)
    log_file = Path(log_dir) / f"report_{datetime.today().strftime('%Y%m%d')}.log"

    fmt = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)-35s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    fh = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=10 * 1024 * 1024, backupCount=7, encoding="utf-8"
    )
    fh.setFormatter(fmt)
    sh = logging.StreamHandler(sys.stdout)
    sh.setFormatter(fmt)

    root = logging.getLogger()
    root.setLevel(numeric)
    root.addHandler(fh)
    root.addHandler(sh)
    logging.getLogger("matplotlib").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="tender-report",
        description="Government tender bidding performance report — PDF generator.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --payload data/sample/report.json
  python main.py --payload report.json --sections executive_summary,top_states
  python main.py --payload report.json --config custom.yaml --log-level DEBUG
  python main.py --list-sections
        """,
    )
    parser.add_argument("--payload",
                        help="Path to the report payload JSON")
    parser.add_argument("--sections", default=None,
                        help="Comma-separated section keys (default: all, or report.sections)")
    parser.add_argument("--output", default=None,
                        help="Destination PDF path (default: paths.output_dir / paths.pdf_filename)")
    parser.add_argument("--config", default="config.yaml",
                        help="Path to config.yaml (default: config.yaml)")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--list-sections", action="store_true",
                        help="Print the available section keys and exit")
    args = parser.parse_args(argv)
    if not args.payload and not args.list_sections:
        parser.error("--payload is required unless --list-sections is given")
    return args


def run_pipeline(args: argparse.Namespace, logger: logging.Logger) -> int:
    """Load the payload and render the report.

    Args:
        args: Parsed CLI arguments.
        logger: Configured root logger.

    Returns:
        0 on success, 1 on error.
    """
    from tender_report.payload import load_payload
    from tender_report.pdf_builder import generate_pdf

    sections = None
    if args.sections is not None:
        sections = [s for s in args.sections.split(",") if s.strip()]

    # -------------------------------------------------------------------------
    # Stage 1: Payload
    # -------------------------------------------------------------------------
    logger.info("=" * 65)
    logger.info("STAGE 1: Payload")
    logger.info("=" * 65)
    try:
        report = load_payload(args.payload)
        logger.info(
            "Payload loaded -- seller: %s | period: %d days | wins: %d",
            report.meta.params.seller_name or "N/A",
            report.meta.params.days,
            len(report.data.missed_but_winnable.recent_wins),
        )
    except FileNotFoundError as exc:
        logger.error("Payload missing.\n%s", exc)
        return 1
    except Exception as exc:
        logger.error("Payload could not be read: %s", exc, exc_info=True)
        return 1

    # -------------------------------------------------------------------------
    # Stage 2: PDF report (metrics + narrative + layout)
    # -------------------------------------------------------------------------
    logger.info("=" * 65)
    logger.info("STAGE 2: PDF Report")
    logger.info("=" * 65)
    try:
        pdf_path = generate_pdf(report, sections, args.config, args.output)
    except Exception as exc:
        logger.error("PDF generation failed: %s", exc, exc_info=True)
        return 1

    logger.info("=" * 65)
    logger.info("REPORT COMPLETE")
    logger.info("  Output: %s", pdf_path)
    logger.info("=" * 65)
    return 0


def main(argv=None) -> None:
    """Parse args, configure logging, and run pipeline."""
    args = _parse_args(argv)

    if args.list_sections:
        from tender_report.pdf_builder import SECTIONS
        print("\n".join(SECTIONS))
        sys.exit(0)

    try:
        with open(args.config, "r") as fh:
            cfg = yaml.safe_load(fh) or {}
        log_dir = cfg.get("paths", {}).get("log_dir", "logs")
    except (OSError, yaml.YAMLError):
        log_dir = "logs"

    _configure_logging(log_dir=log_dir, level=args.log_level)
    logger = logging.getLogger(__name__)

    logger.info(
        "Tender Performance Report Generator v1.0 | %s",
        datetime.today().strftime("%Y-%m-%d %H:%M:%S"),
    )
    sys.exit(run_pipeline(args, logger))


if __name__ == "__main__":
    main()
