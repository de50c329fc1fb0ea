import math

import numpy as np
import pandas as pd

# ============================================================
#  DECLARED COLUMNS PER ENTITY
#  "key"    -> compared by exact equality in lookups
#  "number" -> numeric, absent counts as 0 in aggregates
#  "text"   -> free text, empty string counts as absent
# ============================================================
SCHEMAS = {
    "users": {"Id": "key", "UserType": "number", "FName": "text", "LName": "text"},
    "trips": {"TripId": "key", "RouteId": "key"},
    "bookings": {
        "Id": "key",
        "PassengerId": "key",
        "TripId": "key",
        "SeatNumber": "number",
        "Status": "number",
    },
    "payments": {"TicketId": "key", "Amount": "number", "PaymentStatus": "text"},
    "stations": {"Id": "key", "Name": "text"},
    "ratings": {
        "RatingId": "key",
        "DriverId": "key",
        "TripId": "key",
        "RatingValue": "number",
        "Comment": "text",
    },
    "routes": {"RouteId": "key", "StartStationId": "key", "EndStationId": "key"},
    "cars": {},
    "tickets": {"Id": "key", "BookingId": "key"},
    "userTrips": {},
}


def as_key(value):
    """Normalize one cell to a hashable lookup key, or None when absent."""
    if value is None or value is pd.NA:
        return None
    if isinstance(value, (float, np.floating)):
        if math.isnan(value):
            return None
        if float(value).is_integer():
            return int(value)
        return float(value)
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, (bool, np.bool_)):
        # tagged so true never equals the number 1
        return ("bool", bool(value))
    if isinstance(value, str) and value == "":
        return None
    return value


def display_key(key):
    """Printable form of a key returned by as_key."""
    if isinstance(key, tuple):
        return str(key[1]).lower()
    return key


def as_text(value):
    key = as_key(value)
    if key is None:
        return None
    text = str(display_key(key))
    return text or None


def _coerce(series: pd.Series, kind: str) -> pd.Series:
    if kind == "number":
        return pd.to_numeric(series, errors="coerce").astype("float64")
    # Built as object Series directly so ints next to None are not upcast to float
    convert = as_key if kind == "key" else as_text
    return pd.Series([convert(v) for v in series], index=series.index, dtype="object")


def empty_frame(entity: str) -> pd.DataFrame:
    """An empty dataset carrying the entity's declared columns."""
    return apply_schema(entity, pd.DataFrame())


def apply_schema(entity: str, df: pd.DataFrame) -> pd.DataFrame:
    """
    Coerce a parsed CSV to the entity's declared columns.
    Missing declared columns are added as absent; extra columns are kept as parsed.
    Returns a new DataFrame, the input is not modified.
    """
    out = df.copy()
    for col, kind in SCHEMAS.get(entity, {}).items():
        if col not in out.columns:
            out[col] = pd.Series([None] * len(out), index=out.index, dtype="object")
        out[col] = _coerce(out[col], kind)
    return out.reset_index(drop=True)


def missing_columns(entity: str, df: pd.DataFrame) -> list[str]:
    return [c for c in SCHEMAS.get(entity, {}) if c not in df.columns]
