"""
Configuration and constants for the Transport Booking Dashboard.

Values under "Data source" and "Display" can be overridden via environment
variables; everything else is fixed.
"""

from os import environ


# ---------------------------------------------------------------------------
# Application metadata
# ---------------------------------------------------------------------------
APP_TITLE = "Transport & Booking System Analysis"
APP_ICON = "🚌"


# ---------------------------------------------------------------------------
# Data source
# ---------------------------------------------------------------------------
DATA_BASE = environ.get("TRANSPORT_DATA_BASE", "data")
FETCH_TIMEOUT = float(environ.get("TRANSPORT_FETCH_TIMEOUT", "30"))
LOG_LEVEL = environ.get("TRANSPORT_LOG_LEVEL", "INFO")

# Entity name -> resource file under DATA_BASE
DATASET_FILES = {
    "users": "Users.csv",
    "trips": "Trips.csv",
    "bookings": "Bookings.csv",
    "payments": "Payments.csv",
    "stations": "Stations.csv",
    "ratings": "Ratings.csv",
    "routes": "Routes.csv",
    "cars": "Cars.csv",
    "tickets": "Tickets.csv",
    "userTrips": "UserTrips.csv",
}


# ---------------------------------------------------------------------------
# Domain codes
# ---------------------------------------------------------------------------
USER_TYPE_DRIVER = 1
USER_TYPE_PASSENGER = 2
BOOKING_CONFIRMED = 1

UNSPECIFIED = "unspecified"
UNKNOWN_DRIVER = "driver #{driver_id}"
TRIP_LABEL = "Trip {trip_id}"

# Payment status labels as they appear in the data
PAYMENT_COMPLETED = ("Completed", "مكتمل")
PAYMENT_PENDING = ("Pending", "معلق")


# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------
CURRENCY = environ.get("TRANSPORT_CURRENCY", "EGP")
RECENT_BOOKINGS_LIMIT = 10
RECENT_RATINGS_LIMIT = 5
MAX_RATING = 5

VIEWS = ["Overview", "Bookings", "Payments", "Ratings"]
COLORS = ["#0088FE", "#00C49F", "#FFBB28", "#FF8042", "#8884D8"]
REVENUE_COLOR = "#0088FE"
BOOKINGS_COLOR = "#00C49F"
RATING_COLOR = "#FFD700"
