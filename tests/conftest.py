import pytest

from constants import DATASET_FILES
from schemas import apply_schema, empty_frame
from utils import load_datasets, parse_csv


def build(**texts):
    """Datasets from inline CSV text; entities not given are empty."""
    data = {entity: empty_frame(entity) for entity in DATASET_FILES}
    for entity, text in texts.items():
        data[entity] = apply_schema(entity, parse_csv(text))
    return data


@pytest.fixture(autouse=True)
def _clear_cache():
    load_datasets.clear()
    yield
    load_datasets.clear()


@pytest.fixture
def make_data():
    return build


@pytest.fixture
def scenario():
    # 1 driver, 2 passengers; the second payment's ticket does not exist
    return build(
        users="Id,UserType,FName,LName\n1,1,Ali,Hassan\n2,2,Mona,Adel\n3,2,Omar,Samir\n",
        trips="TripId,RouteId\n10,100\n11,100\n",
        bookings="Id,PassengerId,TripId,SeatNumber,Status\n20,2,10,3,1\n21,3,11,4,0\n",
        tickets="Id,BookingId\n30,20\n",
        routes="RouteId,StartStationId,EndStationId\n100,1,2\n",
        stations="Id,Name\n1,Cairo\n2,Giza\n",
        payments="TicketId,Amount,PaymentStatus\n30,100,Completed\n99,50,Pending\n",
        ratings="RatingId,DriverId,TripId,RatingValue,Comment\n1,1,10,4,Good driver\n",
    )


@pytest.fixture
def data_dir(tmp_path):
    files = {
        "Users.csv": "Id,UserType,FName,LName\n1,1,Ali,Hassan\n\n2,2,Mona,Adel\n",
        "Trips.csv": "TripId,RouteId\n10,100\n",
        "Bookings.csv": "Id,PassengerId,TripId,SeatNumber,Status\n20,2,10,3,1\n",
        "Payments.csv": "TicketId,Amount,PaymentStatus\n30,100,Completed\n31,,Pending\n",
        "Stations.csv": "Id,Name\n1,Cairo\n2,Giza\n",
        "Ratings.csv": "RatingId,DriverId,TripId,RatingValue,Comment\n1,1,10,5,\n",
        "Routes.csv": "RouteId,StartStationId,EndStationId\n100,1,2\n",
        "Tickets.csv": "Id,BookingId\n30,20\n",
    }
    for name, text in files.items():
        (tmp_path / name).write_text(text, encoding="utf-8")
    return tmp_path
