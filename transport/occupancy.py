# pitcrew-backend/transport/occupancy.py
"""
Seat math and join eligibility for carpools.

Functions take a Carpool whose riders are loaded (prefetch "riders") and
never hit the database themselves, so list views stay at two queries.
"""

ELIGIBILITY_DRIVER = "driver"
ELIGIBILITY_RIDING = "riding"
ELIGIBILITY_CAN_JOIN = "can_join"
ELIGIBILITY_FULL = "full"

ELIGIBILITY_LABELS = {
    ELIGIBILITY_DRIVER: "Your ride",
    ELIGIBILITY_RIDING: "Leave ride",
    ELIGIBILITY_CAN_JOIN: "Join ride",
    ELIGIBILITY_FULL: "Full",
}

VEHICLE_CAR = "car"
VEHICLE_BUS = "bus"

# More rider seats than this and it is a bus
CAR_MAX_SEATS = 8

SORT_DEPARTURE = "departure_time"
SORT_SEATS = "seats_available"


def seats_used(carpool) -> int:
    return len(carpool.riders.all())


def seats_remaining(carpool) -> int:
    return carpool.available_seats - seats_used(carpool)


def is_riding(carpool, user) -> bool:
    return any(r.rider_id == user.pk for r in carpool.riders.all())


def eligibility(carpool, user) -> str:
    """
    Where `user` stands with `carpool`, first match wins:
    driver, riding, can_join (a seat is left), full.
    """
    if carpool.driver_id == user.pk:
        return ELIGIBILITY_DRIVER
    if is_riding(carpool, user):
        return ELIGIBILITY_RIDING
    if seats_remaining(carpool) > 0:
        return ELIGIBILITY_CAN_JOIN
    return ELIGIBILITY_FULL


def vehicle_type(carpool) -> str:
    return VEHICLE_CAR if carpool.available_seats <= CAR_MAX_SEATS else VEHICLE_BUS


def filter_carpools(carpools, vehicle="all"):
    if vehicle in (None, "", "all"):
        return list(carpools)
    if vehicle not in (VEHICLE_CAR, VEHICLE_BUS):
        raise ValueError(f"Unknown vehicle filter '{vehicle}'")
    return [c for c in carpools if vehicle_type(c) == vehicle]


def sort_carpools(carpools, sort_by=SORT_DEPARTURE):
    if sort_by in (None, "", SORT_DEPARTURE):
        return sorted(carpools, key=lambda c: (c.departure_time, c.pk))
    if sort_by == SORT_SEATS:
        return sorted(carpools, key=lambda c: (-seats_remaining(c), c.departure_time, c.pk))
    raise ValueError(f"Unknown sort '{sort_by}'")


def overview(carpools, now) -> dict:
    """Totals shown above the ride list."""
    upcoming = [c for c in carpools if c.departure_time > now]
    next_departure = min(upcoming, key=lambda c: c.departure_time) if upcoming else None
    return {
        "total_rides": len(carpools),
        "total_seats_open": sum(max(seats_remaining(c), 0) for c in carpools),
        "next_departure": next_departure.departure_time.isoformat() if next_departure else None,
    }
