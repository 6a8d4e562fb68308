"""Export helpers writing schedules to JSON or CSV files."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, Dict, List, Sequence

from .data_models import ScheduleEntry


def serialize_schedule(schedule: Sequence[ScheduleEntry]) -> List[Dict[str, Any]]:
    """Convert schedule entries into JSON-serialisable dictionaries."""
    serialized = []
    for entry in schedule:
        serialized.append(
            {
                "period": entry.period,
                "date": entry.date.isoformat(),
                "principal_paid": float(entry.principal_paid),
                "interest_charged": float(entry.interest_charged),
                "payment": float(entry.payment),
                "balance": float(entry.balance),
            }
        )
    return serialized


def export_to_json(path: Path, schedule: Sequence[ScheduleEntry], summary: Dict[str, Any]) -> None:
    """Export schedule and summary to a JSON file."""
    data = {"summary": summary, "schedule": serialize_schedule(schedule)}
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def export_to_csv(path: Path, schedule: Sequence[ScheduleEntry]) -> None:
    """Export schedule to a CSV file."""
    header = ["Period", "Date", "Principal", "Interest", "EMI", "Balance"]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for e in schedule:
            writer.writerow(
                [
                    e.period,
                    e.date.isoformat(),
                    float(e.principal_paid),
                    float(e.interest_charged),
                    float(e.payment),
                    float(e.balance),
                ]
            )
