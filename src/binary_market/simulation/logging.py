"""Structured event logging for market runs.

Records every committed market event (initialization, bets, resolution,
claims, dust sweeps) plus rejected calls, and writes them out as CSV or JSON
for later analysis.
"""

from __future__ import annotations

import csv
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import pandas as pd

EVENT_TYPES = ("initialize", "bet", "resolve", "claim", "dust_sweep", "rejected")


@dataclass
class MarketEventLogger:
    """Logs market events to structured formats.

    Tracks:
    - event_records: one row per committed state change
    - rejection_records: one row per call that failed with a market error
    """

    log_dir: Path = Path("market_logs")
    run_id: str = "run_001"

    def __post_init__(self):
        self.log_dir = Path(self.log_dir)
        self.event_records: List[Dict[str, Any]] = []
        self.rejection_records: List[Dict[str, Any]] = []

    def log_event(
        self,
        height: int,
        event_type: str,
        data: Mapping[str, object]
    ) -> None:
        """Log a committed market event.

        Args:
            height: Block height the event was committed at
            event_type: One of ``EVENT_TYPES``
            data: Event fields
        """
        if event_type not in EVENT_TYPES:
            raise ValueError(f"Unknown event type: {event_type}")

        record: Dict[str, Any] = {
            "seq": len(self.event_records),
            "height": height,
            "event": event_type,
        }
        for key, value in data.items():
            if key not in record:
                if isinstance(value, (int, float, str, bool)) or value is None:
                    record[key] = value
                else:
                    record[key] = json.dumps(value, default=str)

        self.event_records.append(record)

    def log_rejection(
        self,
        height: int,
        operation: str,
        sender: str,
        error_code: int,
        error_name: str,
        message: str = ""
    ) -> None:
        """Log a call that was rejected with a market error.

        Args:
            height: Block height of the attempted call
            operation: Host function name
            sender: Calling principal
            error_code: Stable numeric error code
            error_name: Error class name
            message: Human-readable detail
        """
        self.rejection_records.append({
            "seq": len(self.rejection_records),
            "height": height,
            "event": "rejected",
            "operation": operation,
            "sender": sender,
            "error_code": error_code,
            "error_name": error_name,
            "message": message,
        })

    def events_of_type(self, event_type: str) -> List[Dict[str, Any]]:
        if event_type == "rejected":
            return list(self.rejection_records)
        return [r for r in self.event_records if r["event"] == event_type]

    def to_dataframe(self, include_rejections: bool = False) -> pd.DataFrame:
        """Event records as a DataFrame ordered by height."""
        records = list(self.event_records)
        if include_rejections:
            records.extend(self.rejection_records)
        if not records:
            return pd.DataFrame(columns=["seq", "height", "event"])
        df = pd.DataFrame.from_records(records)
        return df.sort_values(["height", "seq"], kind="stable").reset_index(drop=True)

    def save_to_csv(self) -> Dict[str, Path]:
        """Save all logged data to CSV files.

        Returns:
            Dictionary mapping data type to file path
        """
        saved_files = {}
        self.log_dir.mkdir(parents=True, exist_ok=True)

        if self.event_records:
            events_path = self.log_dir / f"{self.run_id}_events.csv"
            self._save_csv(events_path, self.event_records)
            saved_files["events"] = events_path

        if self.rejection_records:
            rejections_path = self.log_dir / f"{self.run_id}_rejections.csv"
            self._save_csv(rejections_path, self.rejection_records)
            saved_files["rejections"] = rejections_path

        return saved_files

    def save_to_json(self) -> Dict[str, Path]:
        """Save all logged data to JSON files.

        Returns:
            Dictionary mapping data type to file path
        """
        saved_files = {}
        self.log_dir.mkdir(parents=True, exist_ok=True)

        if self.event_records:
            events_path = self.log_dir / f"{self.run_id}_events.json"
            self._save_json(events_path, self.event_records)
            saved_files["events"] = events_path

        if self.rejection_records:
            rejections_path = self.log_dir / f"{self.run_id}_rejections.json"
            self._save_json(rejections_path, self.rejection_records)
            saved_files["rejections"] = rejections_path

        return saved_files

    def get_summary_stats(self) -> Dict[str, Any]:
        """Get summary statistics for the run.

        Returns:
            Dictionary of summary statistics
        """
        bets = self.events_of_type("bet")
        claims = self.events_of_type("claim")
        sweeps = self.events_of_type("dust_sweep")

        stats: Dict[str, Any] = {
            "run_id": self.run_id,
            "num_events": len(self.event_records),
            "num_rejections": len(self.rejection_records),
            "num_bets": len(bets),
            "num_bettors": len({r["participant"] for r in bets}),
            "total_staked": sum(r["amount"] for r in bets),
            "total_yes_staked": sum(r["amount"] for r in bets if r["side"] == "YES"),
            "total_no_staked": sum(r["amount"] for r in bets if r["side"] == "NO"),
            "num_claims": len(claims),
            "total_paid": sum(r["payout"] for r in claims),
            "dust_swept": sum(r["amount"] for r in sweeps),
        }

        resolutions = self.events_of_type("resolve")
        if resolutions:
            stats["winning_side"] = resolutions[-1]["winning_side"]
            stats["resolved_at"] = resolutions[-1]["height"]

        if self.rejection_records:
            counts: Dict[str, int] = {}
            for record in self.rejection_records:
                counts[record["error_name"]] = counts.get(record["error_name"], 0) + 1
            stats["rejections_by_error"] = counts

        return stats

    @staticmethod
    def _save_csv(path: Path, records: List[Dict[str, Any]]) -> None:
        """Save records to CSV file.

        Args:
            path: Output file path
            records: List of record dictionaries
        """
        if not records:
            return

        # Get all unique keys across all records
        fieldnames = set()
        for record in records:
            fieldnames.update(record.keys())
        fieldnames = sorted(fieldnames)

        with open(path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            writer.writerows(records)

    @staticmethod
    def _save_json(path: Path, records: List[Dict[str, Any]]) -> None:
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(records, f, indent=2, default=str)


def create_event_logger(run_id: str, log_dir: Optional[Path] = None) -> MarketEventLogger:
    """Create a market event logger.

    Args:
        run_id: Unique identifier for this run
        log_dir: Directory for log files (defaults to ./market_logs)

    Returns:
        Configured MarketEventLogger instance
    """
    if log_dir is None:
        log_dir = Path("market_logs")

    return MarketEventLogger(log_dir=log_dir, run_id=run_id)
