"""Extract the daily timetable linked from the school's schedule page as JSON.

Standalone CLI script. Finds the timetable spreadsheet on the page, parses
it and prints the schedule document to stdout. The document is also written
to OUTPUT when extraction produced no errors.

Run with: python scripts/parse_schedule.py https://school.org.il/schedule
Save:     python scripts/parse_schedule.py https://school.org.il/schedule data/schedule.json
Any link: python scripts/parse_schedule.py --insecure-links https://school.org.il/schedule

Exit codes:
  0 = always; failures are listed in the document's "errors" array
"""

import argparse
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Add project root to path for src imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from src.timetable.config import get_config  # noqa: E402
from src.timetable.logging import get_logger, setup_logging  # noqa: E402
from src.timetable.pipeline import SchedulePipeline  # noqa: E402

log = get_logger("parse_schedule")


def _parse_args() -> argparse.Namespace:
    """Parse CLI arguments using argparse."""
    parser = argparse.ArgumentParser(
        description="Extract the daily timetable from the school's schedule page as JSON.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("page", help="URL of the page linking to the timetable spreadsheet.")
    parser.add_argument(
        "output",
        nargs="?",
        default=None,
        help="File to write the document to (only when there are no errors).",
    )
    parser.add_argument(
        "--insecure-links",
        action="store_true",
        help="Accept spreadsheet links from any host, whatever their text.",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Write logs to stderr as JSON.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Log level (default: TIMETABLE_LOG_LEVEL or INFO).",
    )
    return parser.parse_args()


def _write_output(path: str, payload: str) -> None:
    """Best-effort write; a failure only shows up in the logs."""
    try:
        output_file = Path(path)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_text(payload, encoding="utf-8")
    except OSError as e:
        log.warning("output_write_failed", path=path, error=str(e))
        return
    log.info("output_written", path=path, bytes=len(payload.encode("utf-8")))


def main(args: argparse.Namespace) -> None:
    config = get_config()
    overrides: dict = {}
    if args.insecure_links:
        overrides["secure_links"] = False
    if args.log_json:
        overrides["log_json"] = True
    if args.log_level:
        overrides["log_level"] = args.log_level
    config = config.model_copy(update=overrides)

    setup_logging(json_output=config.log_json, log_level=config.log_level)

    document = SchedulePipeline(config).run(args.page)
    payload = document.to_json()

    if args.output and document.ok:
        _write_output(args.output, payload)

    sys.stdout.reconfigure(encoding="utf-8")
    print(payload)


if __name__ == "__main__":
    main(_parse_args())
