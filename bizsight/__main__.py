"""Run every analytics component over a snapshot file and print the report.

Usage:
    python -m bizsight snapshot.json [--parallel] [--output report.json]

The snapshot file holds ``as_of`` (ISO timestamp) plus ``items``, ``sales``
and ``customers`` lists as exported from the record store.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

from bizsight.core.config import get_settings
from bizsight.core.errors import InvalidInputError
from bizsight.core.logging import configure_logging
from bizsight.services.analytics import AnalyticsSnapshot, run_all

logger = logging.getLogger(__name__)


def load_snapshot(path: Path) -> AnalyticsSnapshot:
    """Read a JSON snapshot export."""
    raw = json.loads(path.read_text(encoding="utf-8"))
    try:
        as_of = datetime.fromisoformat(raw["as_of"])
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidInputError(f"Snapshot needs an ISO 'as_of', got {raw.get('as_of')!r}") from e
    return {
        "as_of": as_of,
        "items": raw.get("items", []),
        "sales": raw.get("sales", []),
        "customers": raw.get("customers", []),
    }


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="bizsight",
        description="Forecasts, anomalies, segments, recommendations and reorder plan",
    )
    parser.add_argument("snapshot", type=Path, help="JSON snapshot file")
    parser.add_argument(
        "--parallel", action="store_true", help="Run independent components on a thread pool"
    )
    parser.add_argument("--output", type=Path, help="Write the report here instead of stdout")
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings)

    try:
        snapshot = load_snapshot(args.snapshot)
        report = run_all(snapshot, parallel=args.parallel, settings=settings)
    except InvalidInputError as e:
        logger.error("Analysis rejected: %s", e)
        return 2

    text = json.dumps(report, default=str, ensure_ascii=False, indent=2)
    if args.output:
        args.output.write_text(text, encoding="utf-8")
        logger.info("Report written to %s", args.output)
    else:
        print(text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
