from __future__ import annotations

import argparse
import importlib
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.nexlinx_ems.nexlinx_ems.common.datetime_utils import now_local, parse_iso_date
from src.nexlinx_ems.nexlinx_ems.common.logging_config import configure_logging
from src.nexlinx_ems.nexlinx_ems.container import build_container


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run one attendance reconciliation pass.")
    parser.add_argument("--fill-gaps", action="store_true", help="re-pull sparse days and biotime_id holes first")
    parser.add_argument("--auto-punchout", action="store_true", help="close sessions left open past the threshold")
    parser.add_argument("--reclassify-from", metavar="YYYY-MM-DD", help="re-run timing classification from this date")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    container = build_container(
        db_config=dict(settings.DB_CONFIG),
        biotime_config=getattr(settings, "BIOTIME_CONFIG", {}),
        pipeline_config=getattr(settings, "PIPELINE_CONFIG", {}),
    )
    now = now_local()
    output: dict = {}

    if args.fill_gaps:
        output["gap_fill"] = container.gap_filler.fill(now=now).to_dict()

    output["pipeline"] = container.pipeline.run_once(now=now).to_dict()

    if args.reclassify_from:
        start = parse_iso_date(args.reclassify_from)
        output["reclassify"] = container.timing_classifier.classify_pending(
            start=start, end=now.date(), reclassify=True, now=now
        ).to_dict()
        output["overbilling"] = container.overbilling_processor.process(
            start=start, end=now.date(), now=now
        ).to_dict()

    if args.auto_punchout:
        output["auto_punchout"] = container.auto_punchout_service.run(now=now).to_dict()

    print(json.dumps(output, indent=2, default=str))
    return 0 if not output["pipeline"]["poll_error"] else 1


if __name__ == "__main__":
    sys.exit(main())
