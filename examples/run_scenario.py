#!/usr/bin/env python3
"""Replay a market scenario file and report the outcome.

Usage:
    python examples/run_scenario.py examples/scenarios/worked_example.yaml
    python examples/run_scenario.py examples/scenarios --log-dir market_logs
"""

import argparse
import sys
from pathlib import Path

from binary_market.simulation import ScenarioRunner, create_event_logger
from binary_market.utils import MarketConfig, list_scenario_files


def parse_args():
    parser = argparse.ArgumentParser(description="Replay prediction market scenarios")
    parser.add_argument("path", type=Path, help="Scenario file or directory of scenario files")
    parser.add_argument("--config", type=str, default=None, help="Path to config.env")
    parser.add_argument("--log-dir", type=Path, default=None, help="Write event logs (CSV + JSON) here; defaults to LOG_DIR when ENABLE_EVENT_LOG is set")
    parser.add_argument("--quiet", action="store_true", help="Hide the progress bar")
    return parser.parse_args()


def main():
    args = parse_args()
    config = MarketConfig(args.config)

    files = list_scenario_files(args.path) if args.path.is_dir() else [args.path]
    if not files:
        print(f"No scenario files found in {args.path}")
        return 1

    failures = 0
    for path in files:
        event_logger = create_event_logger(run_id=path.stem, log_dir=args.log_dir) if args.log_dir else None
        runner = ScenarioRunner.from_file(
            path,
            config=config,
            show_progress=not args.quiet,
            event_logger=event_logger,
        )
        result = runner.run()

        status = "PASS" if result.passed else "FAIL"
        print(f"\n[{status}] {result.name}: {len(result.steps)} steps, final height {result.final_height}")
        print(f"  market:   {dict(result.market_info)}")
        print(f"  balances: {dict(result.balances)}")
        for step in result.mismatches:
            print(f"  step {step.index} ({step.function} by {step.sender}) -> {step.result.to_dict()}, expected {dict(step.expected)}")

        event_logger = runner.event_logger
        if event_logger is not None:
            saved = {**event_logger.save_to_csv(), **event_logger.save_to_json()}
            for kind, file_path in saved.items():
                print(f"  {kind}: {file_path}")

        failures += 0 if result.passed else 1

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
