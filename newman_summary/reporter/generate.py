#!/usr/bin/env python3
"""
Generate Newman Test Summary

Summarizes every report.html under an input directory into one HTML document.

Usage:
    python -m newman_summary.reporter.generate [--input-dir unzipped/] [--output summary.html]
"""

import argparse
import sys

import yaml

from newman_summary.common.config import SummaryConfig, load_config
from newman_summary.common.logger import setup_logging
from newman_summary.models import SummaryError
from newman_summary.pipeline import SummaryPipeline


def main(argv=None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Generate a Newman Test Results Summary from extracted reports",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Basic usage (reads ./unzipped, writes ./summary.html)
  python -m newman_summary.reporter.generate

  # Custom input and output
  python -m newman_summary.reporter.generate --input-dir reports/ --output out/summary.html

  # Also export per-collection status
  python -m newman_summary.reporter.generate --status-json out/status.json
        """,
    )

    parser.add_argument(
        "--input-dir",
        type=str,
        default=None,
        help="Directory containing extracted reports (default: unzipped)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Summary HTML path (default: summary.html)",
    )
    parser.add_argument(
        "--status-json",
        type=str,
        default=None,
        help="Write per-collection status JSON to this path",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML configuration file",
    )

    args = parser.parse_args(argv)
    setup_logging()

    try:
        config = load_config(args.config) if args.config else SummaryConfig()
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        print(f"❌ Invalid configuration: {e}", file=sys.stderr)
        return 1
    updates = {
        key: value
        for key, value in (
            ("input_dir", args.input_dir),
            ("output_path", args.output),
            ("status_path", args.status_json),
        )
        if value
    }
    if updates:
        config = config.model_copy(update=updates)

    print(f"🔍 Searching {config.input_dir} for reports...")
    try:
        context = SummaryPipeline(config).run()
    except SummaryError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    print(f"✅ {context.output_path} created successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
