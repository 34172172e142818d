import argparse
import logging
import sys

from dotenv import load_dotenv

from discrepancy_app.config.report_config import load_report_config, parse_date
from discrepancy_app.core.exceptions import DiscrepancyError
from discrepancy_app.source_fetchers.fetcher_factory import build_fetcher
from discrepancy_app.report_engine.report_service import ReportService

logger = logging.getLogger("discrepancy_app")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Compare daily Adobe Analytics and Google Analytics metrics and write a report."
    )
    parser.add_argument("--config", default="discrepancy_app/config/report.toml",
                        help="Path to the report TOML configuration")
    parser.add_argument("--start-date", help="Override start_date (YYYY-MM-DD)")
    parser.add_argument("--end-date", help="Override end_date (YYYY-MM-DD)")
    parser.add_argument("--output-dir", help="Override output_dir")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # Credentials referenced as ${VAR} in the config may live in .env
    load_dotenv()

    try:
        # 1. Load configuration and apply overrides
        config = load_report_config(args.config).with_overrides(
            start_date=parse_date(args.start_date, "--start-date") if args.start_date else None,
            end_date=parse_date(args.end_date, "--end-date") if args.end_date else None,
            output_dir=args.output_dir,
        )

        # 2. One fetcher per platform
        fetchers = {
            platform: build_fetcher(platform, settings.kind, settings.options)
            for platform, settings in config.platforms.items()
        }

        # 3. Fetch, compare, render
        result = ReportService(config, fetchers).run()
    except DiscrepancyError as e:
        logger.error("Report aborted: %s", e)
        return 1

    print(f"Report written to {result.report_path}")
    for label in result.skipped_labels:
        print(f"No comparison possible for {label}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
