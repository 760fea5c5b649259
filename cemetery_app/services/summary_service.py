"""
Dashboard aggregation over the full record list
"""

import math
from dataclasses import dataclass, field
from datetime import date

from cemetery_app.shared.grave_calculations import parse_iso_date
from cemetery_app.shared.models import GraveRecord


RECENT_RECORDS_LIMIT = 3


@dataclass
class RecordSummary:
    """Figures shown on the dashboard"""
    total: int = 0
    average_age: int = 0
    this_year_count: int = 0
    latest_grave_number: str | None = None
    recent_records: list[GraveRecord] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'total': self.total,
            'averageAge': self.average_age,
            'thisYearCount': self.this_year_count,
            'latestGraveNumber': self.latest_grave_number,
            'recentRecords': [
                {'id': r.id, 'deceasedFullName': r.deceased_full_name, 'dateOfDeath': r.date_of_death}
                for r in self.recent_records
            ],
        }


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def summarize(records: list[GraveRecord], today: date = None) -> RecordSummary:
    """Aggregate records in store order (most recent first)"""
    today = today or date.today()
    if not records:
        return RecordSummary()

    average_age = round_half_up(sum(r.age_at_death for r in records) / len(records))

    this_year_count = 0
    for record in records:
        death = parse_iso_date(record.date_of_death)
        if death is not None and death.year == today.year:
            this_year_count += 1

    return RecordSummary(
        total=len(records),
        average_age=average_age,
        this_year_count=this_year_count,
        latest_grave_number=records[0].grave_number,
        recent_records=list(records[:RECENT_RECORDS_LIMIT]),
    )
