#!/usr/bin/env python3
"""Ingest uploaded photos into the gallery.

Usage:
    python run_ingest.py                          # use settings from env / .env
    python run_ingest.py --project-dir ./site     # override the project root
    python run_ingest.py --cleanup all            # also clear skipped and failed uploads

Exits 0 on success (including an empty inbox) and 1 on a fatal error.
"""
import argparse
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from pipeline import ingest
from pipeline.errors import IngestError
from settings import LOG_LEVELS, Settings

logger = logging.getLogger("run_ingest")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--project-dir", type=Path, default=None, dest="project_dir",
                        help="Gallery root containing uploads/ and public/")
    parser.add_argument("--log-level", choices=LOG_LEVELS, default=None, dest="log_level",
                        help="Overrides GALLERY_LOG_LEVEL")
    parser.add_argument("--cleanup", choices=("processed", "all"), default=None,
                        help="Which inbox files to delete after a successful run")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level or logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
        datefmt="%H:%M:%S",
    )

    overrides: dict = {}
    if args.project_dir is not None:
        overrides["project_dir"] = args.project_dir
    if args.cleanup is not None:
        overrides["cleanup_policy"] = args.cleanup

    try:
        settings = Settings(**overrides)
    except ValidationError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 1

    if args.log_level is None:
        logging.getLogger().setLevel(settings.log_level)

    logger.info("=== Ingest: %s ===", settings.inbox_dir)
    try:
        report = ingest.run(settings)
    except IngestError as exc:
        logger.error("Ingest failed: %s", exc)
        return 1

    logger.info("=== Done → %d new image(s), %d in gallery ===",
                len(report.processed), report.manifest_size)
    return 0


if __name__ == "__main__":
    sys.exit(main())
