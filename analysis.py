"""
Aggregations behind the dashboard views.

Every function takes the loaded datasets (entity name -> DataFrame, as built by
utils.load_datasets or utils.synth_datasets) and returns a fresh result; the
inputs are never modified. Grouped results keep the order in which each key
first appears.
"""

import math
from decimal import ROUND_HALF_UP, Decimal

import pandas as pd

from constants import (
    BOOKING_CONFIRMED,
    MAX_RATING,
    PAYMENT_COMPLETED,
    PAYMENT_PENDING,
    RECENT_BOOKINGS_LIMIT,
    RECENT_RATINGS_LIMIT,
    TRIP_LABEL,
    UNKNOWN_DRIVER,
    UNSPECIFIED,
    USER_TYPE_DRIVER,
    USER_TYPE_PASSENGER,
)
from schemas import as_key, as_text, display_key, empty_frame


def round1(value) -> float:
    """Round half-up to one decimal, the way the figures are displayed."""
    return float(Decimal(float(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _frame(data, entity: str) -> pd.DataFrame:
    df = data.get(entity)
    return empty_frame(entity) if df is None else df


def _numbers(df: pd.DataFrame, col: str) -> pd.Series:
    # absent -> 0
    return pd.to_numeric(df[col], errors="coerce").fillna(0.0)


def index_by(df: pd.DataFrame, key: str) -> dict:
    """
    Map each key value to its record (a dict of column -> value).
    The first record holding a key wins; records without a key are left out.
    """
    index = {}
    for record in df.to_dict("records"):
        k = as_key(record.get(key))
        if k is not None and k not in index:
            index[k] = record
    return index


def _lookup(index: dict, value):
    k = as_key(value)
    return None if k is None else index.get(k)


def _present(value) -> bool:
    return as_key(value) is not None


# ============================================================
#  OVERVIEW
# ============================================================
def overview_stats(data) -> dict:
    users = _frame(data, "users")
    payments = _frame(data, "payments")
    ratings = _frame(data, "ratings")

    user_type = pd.to_numeric(users["UserType"], errors="coerce")
    rating_values = _numbers(ratings, "RatingValue")
    avg_rating = rating_values.sum() / len(rating_values) if len(rating_values) else 0.0

    return {
        "total_users": len(users),
        "drivers": int((user_type == USER_TYPE_DRIVER).sum()),
        "passengers": int((user_type == USER_TYPE_PASSENGER).sum()),
        "total_trips": len(_frame(data, "trips")),
        "total_bookings": len(_frame(data, "bookings")),
        "total_revenue": float(_numbers(payments, "Amount").sum()),
        "avg_rating": round1(avg_rating),
        "total_ratings": len(ratings),
    }


# ============================================================
#  BOOKINGS
# ============================================================
def bookings_by_trip(data) -> pd.DataFrame:
    """Booking count per TripId; bookings without a TripId form their own group."""
    bookings = _frame(data, "bookings")
    counts = {}
    for trip_id in bookings["TripId"]:
        k = as_key(trip_id)
        counts[k] = counts.get(k, 0) + 1

    return pd.DataFrame(
        {
            "trip_id": pd.Series(list(counts), dtype="object"),
            "trip": [TRIP_LABEL.format(trip_id=UNSPECIFIED if k is None else display_key(k)) for k in counts],
            "bookings": pd.Series(list(counts.values()), dtype="int64"),
        }
    )


def booking_status_label(status) -> str:
    return "Confirmed" if as_key(status) == BOOKING_CONFIRMED else "Cancelled"


def recent_bookings(data, limit: int = RECENT_BOOKINGS_LIMIT) -> pd.DataFrame:
    bookings = _frame(data, "bookings").head(limit)
    out = bookings[["Id", "PassengerId", "TripId", "SeatNumber"]].copy()
    out["status_label"] = [booking_status_label(s) for s in bookings["Status"]]
    return out.reset_index(drop=True)


# ============================================================
#  REVENUE
# ============================================================
def _station_name(stations: dict, station_id) -> str:
    station = _lookup(stations, station_id)
    if station is None or not _present(station.get("Name")):
        return UNSPECIFIED
    return str(station["Name"])


def route_name(route: dict, stations: dict) -> str:
    start = _station_name(stations, route.get("StartStationId"))
    end = _station_name(stations, route.get("EndStationId"))
    return f"{start} - {end}"


def resolve_route(payment: dict, tickets: dict, bookings: dict, trips: dict, routes: dict):
    """Follow payment -> ticket -> booking -> trip -> route; None if any hop is missing."""
    ticket = _lookup(tickets, payment.get("TicketId"))
    if ticket is None:
        return None
    booking = _lookup(bookings, ticket.get("BookingId"))
    if booking is None:
        return None
    trip = _lookup(trips, booking.get("TripId"))
    if trip is None:
        return None
    return _lookup(routes, trip.get("RouteId"))


def revenue_by_route(data) -> pd.DataFrame:
    """
    Sum payment amounts per route name ("{start station} - {end station}").
    Payments whose join chain breaks are left out here, though they still
    count towards overview_stats()["total_revenue"].
    """
    tickets = index_by(_frame(data, "tickets"), "Id")
    bookings = index_by(_frame(data, "bookings"), "Id")
    trips = index_by(_frame(data, "trips"), "TripId")
    routes = index_by(_frame(data, "routes"), "RouteId")
    stations = index_by(_frame(data, "stations"), "Id")

    payments = _frame(data, "payments")
    amounts = _numbers(payments, "Amount").tolist()

    revenue = {}
    for payment, amount in zip(payments.to_dict("records"), amounts):
        route = resolve_route(payment, tickets, bookings, trips, routes)
        if route is None:
            continue
        name = route_name(route, stations)
        revenue[name] = revenue.get(name, 0.0) + amount

    return pd.DataFrame(list(revenue.items()), columns=["route", "revenue"])


# ============================================================
#  PAYMENTS
# ============================================================
def _status(value) -> str:
    return as_text(value) or UNSPECIFIED


def payment_status_counts(data) -> pd.DataFrame:
    payments = _frame(data, "payments")
    counts = {}
    for value in payments["PaymentStatus"]:
        status = _status(value)
        counts[status] = counts.get(status, 0) + 1
    return pd.DataFrame(list(counts.items()), columns=["name", "value"])


def payment_summary(data) -> dict:
    statuses = [_status(v) for v in _frame(data, "payments")["PaymentStatus"]]
    return {
        "total_payments": len(statuses),
        "completed": sum(s in PAYMENT_COMPLETED for s in statuses),
        "pending": sum(s in PAYMENT_PENDING for s in statuses),
    }


# ============================================================
#  RATINGS
# ============================================================
def driver_name(users, driver_id) -> str:
    """Display name of a driver, looked up among all users by Id."""
    index = users if isinstance(users, dict) else index_by(users, "Id")
    user = _lookup(index, driver_id)
    parts = [str(user[c]) for c in ("FName", "LName") if _present(user.get(c))] if user else []
    if not parts:
        return UNKNOWN_DRIVER.format(driver_id=display_key(as_key(driver_id)))
    return " ".join(parts)


def ratings_by_driver(data) -> pd.DataFrame:
    users = index_by(_frame(data, "users"), "Id")
    ratings = _frame(data, "ratings")
    values = _numbers(ratings, "RatingValue").tolist()

    grouped = {}
    for driver_id, value in zip(ratings["DriverId"], values):
        grouped.setdefault(driver_name(users, driver_id), []).append(value)

    rows = [
        {"driver": name, "avg_rating": round1(sum(vals) / len(vals)), "total_ratings": len(vals)}
        for name, vals in grouped.items()
    ]
    return pd.DataFrame(rows, columns=["driver", "avg_rating", "total_ratings"])


def stars(value) -> str:
    v = as_key(value)
    # star i is lit while i < value
    filled = int(min(max(math.ceil(v), 0), MAX_RATING)) if isinstance(v, (int, float)) else 0
    return "★" * filled + "☆" * (MAX_RATING - filled)


def recent_ratings(data, limit: int = RECENT_RATINGS_LIMIT) -> pd.DataFrame:
    users = index_by(_frame(data, "users"), "Id")
    ratings = _frame(data, "ratings").head(limit)
    rows = [
        {
            "rating_id": as_key(r["RatingId"]),
            "driver": driver_name(users, r["DriverId"]),
            "rating": r["RatingValue"],
            "stars": stars(r["RatingValue"]),
            "trip_id": display_key(as_key(r["TripId"])),
            "comment": r["Comment"] if _present(r["Comment"]) else None,
        }
        for r in ratings.to_dict("records")
    ]
    out = pd.DataFrame(rows, columns=["rating_id", "driver", "rating", "stars", "trip_id", "comment"])
    # object dtype keeps absent comments as None
    out["comment"] = pd.Series([r["comment"] for r in rows], index=out.index, dtype="object")
    return out
