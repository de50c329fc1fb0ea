import io
import logging
import re
from pathlib import Path

import numpy as np
import pandas as pd
import requests
import streamlit as st

from constants import DATASET_FILES, FETCH_TIMEOUT
from schemas import apply_schema, empty_frame, missing_columns

logger = logging.getLogger(__name__)

_INTEGER = re.compile(r"^\s*-?\d+\s*$")
_NUMBER = re.compile(r"^\s*-?(\d+\.?|\.\d+|\d+\.\d+)([eE][-+]?\d+)?\s*$")
_BOOLEANS = {"true": True, "false": False}


class DatasetLoadError(Exception):
    """A dataset resource could not be fetched."""

    def __init__(self, entity: str, location: str, reason: str):
        self.entity = entity
        self.location = location
        self.reason = reason
        super().__init__(f"{entity} ({location}): {reason}")


# ============================================================
#  FETCH + PARSE
# ============================================================
def is_url(location: str) -> bool:
    return str(location).lower().startswith(("http://", "https://"))


def resource_location(base, entity: str) -> str:
    """Where the entity's file lives under ``base`` (a directory or a URL prefix)."""
    filename = DATASET_FILES[entity]
    if is_url(base):
        return f"{str(base).rstrip('/')}/{filename}"
    return str(Path(base) / filename)


def fetch_text(location: str, entity: str = "") -> str:
    """Read the raw UTF-8 text of a local file or an http(s) resource."""
    if is_url(location):
        try:
            r = requests.get(location, timeout=FETCH_TIMEOUT)
            r.raise_for_status()
        except requests.RequestException as e:
            raise DatasetLoadError(entity, location, str(e)) from e
        return r.content.decode("utf-8-sig")

    try:
        return Path(location).read_text(encoding="utf-8-sig")
    except OSError as e:
        raise DatasetLoadError(entity, location, e.strerror or str(e)) from e


def _skip_bad_line(fields):
    logger.warning("Skipping malformed CSV row with %d fields", len(fields))
    return None


def infer_cell(text):
    """Type one CSV cell: int, float, bool, str, or None when empty."""
    if not isinstance(text, str) or text == "":
        return None
    if _INTEGER.match(text):
        return int(text)
    if _NUMBER.match(text):
        return float(text)
    return _BOOLEANS.get(text.lower(), text)


def parse_csv(text: str) -> pd.DataFrame:
    """
    Parse comma-delimited text with a header row.
    - Blank lines are skipped; rows with too many fields are dropped.
    - Each cell is typed on its own (see infer_cell), so a column may mix types.
    - Only empty cells count as missing ("NA", "null" etc. stay strings).
    """
    if not text.strip():
        return pd.DataFrame()
    raw = pd.read_csv(
        io.StringIO(text),
        dtype=str,
        skip_blank_lines=True,
        keep_default_na=False,
        on_bad_lines=_skip_bad_line,
        engine="python",
    )
    return pd.DataFrame(
        {col: pd.Series([infer_cell(v) for v in raw[col]], index=raw.index, dtype="object") for col in raw.columns},
        index=raw.index,
        columns=raw.columns,
    )


# ============================================================
#  DATASET LOADER
# ============================================================
def read_dataset(base, entity: str) -> pd.DataFrame:
    """
    Fetch, parse and type one entity's dataset.
    Raises DatasetLoadError when the resource cannot be read or parsed; use
    load_datasets() for the forgiving version.
    """
    location = resource_location(base, entity)
    text = fetch_text(location, entity)
    try:
        df = parse_csv(text)
    except (pd.errors.ParserError, ValueError) as e:
        raise DatasetLoadError(entity, location, f"unparseable CSV: {e}") from e
    return apply_schema(entity, df)


@st.cache_data(show_spinner=False)
def load_datasets(base):
    """
    Load every entity under ``base``.
    A resource that fails is logged and replaced by an empty dataset; the
    remaining resources are still loaded.
    Returns: (data, failed) where data maps entity -> DataFrame and failed
    lists the entities that could not be loaded.
    """
    data, failed = {}, []
    for entity in DATASET_FILES:
        try:
            data[entity] = read_dataset(base, entity)
        except (DatasetLoadError, UnicodeDecodeError) as e:
            logger.error("Error loading %s: %s", DATASET_FILES[entity], e)
            data[entity] = empty_frame(entity)
            failed.append(entity)
        else:
            logger.info("Loaded %d %s rows", len(data[entity]), entity)
    return data, failed


# ============================================================
#  FILE UPLOAD OVERRIDE
# ============================================================
def read_upload(entity: str, raw: bytes):
    """
    Parse an uploaded CSV for one entity.
    Returns (DataFrame, missing_columns); the DataFrame is None when the
    upload lacks declared columns or cannot be parsed.
    """
    try:
        df = parse_csv(raw.decode("utf-8-sig"))
    except (pd.errors.ParserError, UnicodeDecodeError, ValueError) as e:
        logger.warning("Rejected %s upload: %s", entity, e)
        return None, []

    missing = missing_columns(entity, df)
    if missing:
        logger.warning("Rejected %s upload, missing columns %s", entity, missing)
        return None, missing
    return apply_schema(entity, df), []


def upload_override(entity: str):
    """
    Optional CSV uploader for one dataset.
    Returns (DataFrame, 'upload') on success or (None, None) if nothing usable was uploaded.
    """
    up = st.file_uploader(DATASET_FILES[entity], type=["csv"], key=f"u_{entity}")
    if up is None:
        return None, None

    df, missing = read_upload(entity, up.getvalue())
    if df is None:
        if missing:
            st.error(f"{DATASET_FILES[entity]} is missing columns: {missing}. Keeping the loaded data.")
        else:
            st.error(f"Could not read {DATASET_FILES[entity]}. Keeping the loaded data.")
        return None, None
    return df, "upload"


# ============================================================
#  SMALL BADGE DISPLAY
# ============================================================
def source_kind(use_synth: bool, uploaded: bool) -> str:
    # synthetic wins: uploads only replace single datasets
    if use_synth:
        return "synthetic"
    return "upload" if uploaded else "file"


def badge(kind: str, failed=()):
    if kind == "synthetic":
        st.caption("🧪 Using synthetic sample data")
    elif kind == "upload":
        st.caption("✅ Using CSV files with your uploads applied")
    elif failed:
        names = ", ".join(DATASET_FILES[e] for e in failed)
        st.caption(f"⚠️ Using CSV files from the data source; not found or unreadable: {names}")
    else:
        st.caption("✅ Using CSV files from the data source")


# ============================================================
#  SYNTHETIC SAMPLE SNAPSHOT
# ============================================================
def synth_datasets(seed: int = 7):
    """
    Small self-consistent transport system: every payment resolves to a route
    except two whose ticket does not exist.
    """
    rs = np.random.RandomState(seed)

    station_names = ["Ramses", "Giza", "Alexandria", "Tanta", "Mansoura", "Suez"]
    stations = pd.DataFrame({"Id": range(1, len(station_names) + 1), "Name": station_names})

    routes = pd.DataFrame(
        {
            "RouteId": [1, 2, 3, 4],
            "StartStationId": [1, 1, 2, 5],
            "EndStationId": [3, 4, 6, 1],
        }
    )

    first = ["Ahmed", "Mona", "Omar", "Sara", "Youssef", "Nour", "Karim", "Laila",
             "Hany", "Dina", "Tarek", "Salma", "Ali", "Rana", "Mostafa", "Heba"]
    last = ["Hassan", "Ibrahim", "Khaled", "Mahmoud", "Farouk", "Adel", "Samir", "Nabil"]
    n_users = len(first)
    user_type = np.where(np.arange(n_users) < 4, 1, 2)
    users = pd.DataFrame(
        {
            "Id": range(1, n_users + 1),
            "UserType": user_type,
            "FName": first,
            "LName": [last[i % len(last)] for i in range(n_users)],
        }
    )
    driver_ids = users.loc[users["UserType"] == 1, "Id"].tolist()
    passenger_ids = users.loc[users["UserType"] == 2, "Id"].tolist()

    cars = pd.DataFrame(
        {
            "CarId": range(1, len(driver_ids) + 1),
            "DriverId": driver_ids,
            "Model": ["Toyota Hiace", "Hyundai H1", "Kia Carnival", "Toyota Hiace"],
            "Capacity": [14, 12, 8, 14],
        }
    )

    n_trips = 8
    trips = pd.DataFrame(
        {
            "TripId": range(1, n_trips + 1),
            "RouteId": rs.choice(routes["RouteId"], size=n_trips),
            "DriverId": rs.choice(driver_ids, size=n_trips),
        }
    )

    n_bookings = 30
    bookings = pd.DataFrame(
        {
            "Id": range(1, n_bookings + 1),
            "PassengerId": rs.choice(passenger_ids, size=n_bookings),
            "TripId": rs.choice(trips["TripId"], size=n_bookings),
            "SeatNumber": rs.randint(1, 15, size=n_bookings),
            "Status": rs.choice([1, 0], size=n_bookings, p=[0.8, 0.2]),
        }
    )

    tickets = pd.DataFrame({"Id": range(1, n_bookings + 1), "BookingId": bookings["Id"]})

    n_payments = n_bookings + 2
    ticket_ids = list(tickets["Id"]) + [900, 901]  # the last two never resolve
    payments = pd.DataFrame(
        {
            "PaymentId": range(1, n_payments + 1),
            "TicketId": ticket_ids,
            "Amount": rs.choice([50, 75, 100, 120, 150], size=n_payments),
            "PaymentStatus": rs.choice(["Completed", "Pending", "Failed"], size=n_payments, p=[0.7, 0.2, 0.1]),
        }
    )

    comments = ["Great driver", "On time", "", "Comfortable ride", "Late pickup", "", "Very polite"]
    n_ratings = 12
    rated_trips = rs.choice(trips["TripId"], size=n_ratings)
    ratings = pd.DataFrame(
        {
            "RatingId": range(1, n_ratings + 1),
            "DriverId": trips.set_index("TripId").loc[rated_trips, "DriverId"].to_numpy(),
            "TripId": rated_trips,
            "RatingValue": rs.randint(2, 6, size=n_ratings),
            "Comment": rs.choice(comments, size=n_ratings),
        }
    )

    user_trips = bookings.loc[bookings["Status"] == 1, ["PassengerId", "TripId"]].rename(
        columns={"PassengerId": "UserId"}
    )

    raw = {
        "users": users,
        "trips": trips,
        "bookings": bookings,
        "payments": payments,
        "stations": stations,
        "ratings": ratings,
        "routes": routes,
        "cars": cars,
        "tickets": tickets,
        "userTrips": user_trips,
    }
    return {entity: apply_schema(entity, df) for entity, df in raw.items()}
