"""
Search over the in-memory record list
"""

from cemetery_app.shared.models import GraveRecord


VIEW_MODES = ('card', 'list')


def matches(record: GraveRecord, term: str) -> bool:
    """Name matches case-insensitively, grave number as a plain substring"""
    return (term.lower() in (record.deceased_full_name or '').lower()
            or term in (record.grave_number or ''))


def filter_records(records: list[GraveRecord], term: str) -> list[GraveRecord]:
    """Records matching the search term, in store order"""
    if not term:
        return list(records)
    return [record for record in records if matches(record, term)]


def normalize_view_mode(view_mode: str) -> str:
    return view_mode if view_mode in VIEW_MODES else VIEW_MODES[0]
