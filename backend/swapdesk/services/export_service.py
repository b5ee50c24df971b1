# Overview: CSV export of recent swap decisions.

from __future__ import annotations

import csv
import io
from typing import Iterable

from .views import DecisionView


EXPORT_FILENAME = "swap-requests-export.csv"
EXPORT_HEADER = ["Date", "Requester", "Shift Date", "Shift Time", "Status", "Notes"]


def decision_row(decision: DecisionView) -> list[str]:
    return [
        decision.updated_at.date().isoformat() if decision.updated_at else "",
        decision.requester.display_name,
        decision.shift.date,
        decision.shift.time_range,
        decision.status,
        decision.manager_notes or "",
    ]


def decisions_to_csv(decisions: Iterable[DecisionView]) -> str:
    """
    Header line, then one fully quoted row per decision. Quoting every data
    field keeps free-text notes (commas, quotes, newlines) intact.
    """
    stream = io.StringIO()
    csv.writer(stream, lineterminator="\n").writerow(EXPORT_HEADER)
    writer = csv.writer(stream, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for decision in decisions:
        writer.writerow(decision_row(decision))
    return stream.getvalue()
