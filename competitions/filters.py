# pitcrew-backend/competitions/filters.py
"""
Filter chain applied to upstream schedule payloads. Each step narrows the
list; dates are compared on their ISO date prefix (YYYY-MM-DD).
"""

FRC_SEARCH_FIELDS = ("name", "address", "code", "districtCode")
FTC_SEARCH_FIELDS = ("name", "address", "code", "regionCode", "city", "venue")


def _date_prefix(value):
    return str(value)[:10] if value else None


def search_events(events, term, fields):
    if not term:
        return events
    needle = str(term).lower()
    return [
        e for e in events
        if any(needle in str(e.get(f) or "").lower() for f in fields)
    ]


def start_on_or_after(events, start_date):
    bound = _date_prefix(start_date)
    if not bound:
        return events
    return [e for e in events if _date_prefix(e.get("dateStart")) and _date_prefix(e["dateStart"]) >= bound]


def end_on_or_before(events, end_date):
    bound = _date_prefix(end_date)
    if not bound:
        return events
    return [e for e in events if _date_prefix(e.get("dateEnd")) and _date_prefix(e["dateEnd"]) <= bound]


def filter_frc_events(events, search=None, event_type=None, district=None, start_date=None, end_date=None):
    events = search_events(events, search, FRC_SEARCH_FIELDS)
    if event_type:
        events = [e for e in events if e.get("type") == event_type]
    if district:
        events = [e for e in events if e.get("districtCode") == district]
    events = start_on_or_after(events, start_date)
    events = end_on_or_before(events, end_date)
    return sorted(events, key=lambda e: str(e.get("dateStart") or ""))


def filter_ftc_events(events, search=None, event_type=None, region=None, start_date=None, end_date=None):
    events = search_events(events, search, FTC_SEARCH_FIELDS)
    if event_type:
        events = [e for e in events if e.get("type") == event_type or e.get("typeName") == event_type]
    if region:
        events = [e for e in events if e.get("regionCode") == region]
    events = start_on_or_after(events, start_date)
    events = end_on_or_before(events, end_date)
    # Not every FTC event carries dates; fall back to the event code
    return sorted(events, key=lambda e: str(e.get("dateStart") or e.get("code") or ""))
