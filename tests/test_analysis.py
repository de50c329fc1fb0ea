import pandas as pd

from analysis import (
    bookings_by_trip,
    driver_name,
    index_by,
    overview_stats,
    payment_status_counts,
    payment_summary,
    ratings_by_driver,
    recent_bookings,
    recent_ratings,
    revenue_by_route,
    round1,
    stars,
)


def test_overview_scenario(scenario):
    assert overview_stats(scenario) == {
        "total_users": 3,
        "drivers": 1,
        "passengers": 2,
        "total_trips": 2,
        "total_bookings": 2,
        "total_revenue": 150.0,
        "avg_rating": 4.0,
        "total_ratings": 1,
    }


def test_revenue_by_route_only_counts_resolvable_payments(scenario):
    df = revenue_by_route(scenario)
    assert df.to_dict("records") == [{"route": "Cairo - Giza", "revenue": 100.0}]
    assert overview_stats(scenario)["total_revenue"] == 150.0


def test_missing_amount_counts_as_zero(make_data):
    data = make_data(payments="TicketId,Amount,PaymentStatus\n1,,Completed\n2,40,Completed\n3,abc,Pending\n")
    assert overview_stats(data)["total_revenue"] == 40.0


def test_average_rating_empty_and_mean(make_data):
    assert overview_stats(make_data())["avg_rating"] == 0
    data = make_data(ratings="RatingId,DriverId,RatingValue\n1,7,5\n2,7,3\n3,8,4\n")
    assert overview_stats(data)["avg_rating"] == 4.0


def test_average_rating_absent_value_counts_as_zero(make_data):
    data = make_data(ratings="RatingId,DriverId,RatingValue\n1,7,5\n2,7,\n")
    assert overview_stats(data)["avg_rating"] == 2.5


def test_round1_rounds_half_up():
    assert round1(2.25) == 2.3
    assert round1(4) == 4.0
    assert round1(3.333) == 3.3


def test_bookings_by_trip_counts_in_first_seen_order(make_data):
    data = make_data(bookings="Id,TripId\n1,5\n2,3\n3,5\n4,\n5,3\n6,5\n")
    df = bookings_by_trip(data)
    assert df["trip_id"].tolist() == [5, 3, None]
    assert df["bookings"].tolist() == [3, 2, 1]
    assert df["trip"].tolist() == ["Trip 5", "Trip 3", "Trip unspecified"]
    assert df["bookings"].sum() == overview_stats(data)["total_bookings"]


def test_bookings_by_trip_empty(make_data):
    df = bookings_by_trip(make_data())
    assert df.empty
    assert list(df.columns) == ["trip_id", "trip", "bookings"]


def test_revenue_by_route_breaks_at_each_hop(make_data):
    data = make_data(
        payments="TicketId,Amount\n1,10\n2,20\n3,30\n4,40\n5,50\n",
        tickets="Id,BookingId\n1,11\n2,99\n3,13\n4,14\n5,15\n",
        bookings="Id,TripId\n11,21\n13,99\n14,24\n15,25\n",
        trips="TripId,RouteId\n21,31\n24,99\n25,31\n",
        routes="RouteId,StartStationId,EndStationId\n31,41,42\n",
        stations="Id,Name\n41,Cairo\n42,Giza\n",
    )
    # payments 2, 3 and 4 break at booking, trip and route respectively
    assert revenue_by_route(data).to_dict("records") == [{"route": "Cairo - Giza", "revenue": 60.0}]


def test_revenue_by_route_unknown_station_is_unspecified(make_data):
    data = make_data(
        payments="TicketId,Amount\n1,10\n2,5\n",
        tickets="Id,BookingId\n1,1\n2,2\n",
        bookings="Id,TripId\n1,1\n2,2\n",
        trips="TripId,RouteId\n1,1\n2,2\n",
        routes="RouteId,StartStationId,EndStationId\n1,1,9\n2,8,1\n",
        stations="Id,Name\n1,Cairo\n",
    )
    df = revenue_by_route(data)
    assert df["route"].tolist() == ["Cairo - unspecified", "unspecified - Cairo"]
    assert df["revenue"].tolist() == [10.0, 5.0]


def test_revenue_by_route_sums_per_route_name(make_data):
    data = make_data(
        payments="TicketId,Amount\n1,10\n2,\n3,7\n",
        tickets="Id,BookingId\n1,1\n2,2\n3,3\n",
        bookings="Id,TripId\n1,1\n2,1\n3,2\n",
        trips="TripId,RouteId\n1,1\n2,2\n",
        routes="RouteId,StartStationId,EndStationId\n1,1,2\n2,1,2\n",
        stations="Id,Name\n1,Cairo\n2,Giza\n",
    )
    assert revenue_by_route(data).to_dict("records") == [{"route": "Cairo - Giza", "revenue": 17.0}]


def test_keys_match_by_exact_value(make_data):
    # "T1" on one side and 1 on the other never join; 1.0 and 1 do
    data = make_data(
        payments="TicketId,Amount\nT1,10\n1,20\n",
        tickets="Id,BookingId\n1,1\n",
        bookings="Id,TripId\n1.0,1\n",
        trips="TripId,RouteId\n1,1\n",
        routes="RouteId,StartStationId,EndStationId\n1,1,1\n",
        stations="Id,Name\n1,Cairo\n",
    )
    assert revenue_by_route(data)["revenue"].tolist() == [20.0]


def test_first_record_wins_in_lookup(make_data):
    data = make_data(users="Id,FName,LName\n1,Ali,Hassan\n1,Other,Person\n")
    assert index_by(data["users"], "Id")[1]["FName"] == "Ali"


def test_driver_name_resolution(make_data):
    data = make_data(users="Id,UserType,FName,LName\n3,1,Ali,Hassan\n")
    assert driver_name(data["users"], 7) == "driver #7"
    assert driver_name(data["users"], 3) == "Ali Hassan"


def test_ratings_by_driver(make_data):
    data = make_data(
        users="Id,UserType,FName,LName\n1,1,Ali,Hassan\n",
        ratings="RatingId,DriverId,RatingValue\n1,1,5\n2,7,3\n3,1,4\n4,1,4\n",
    )
    assert ratings_by_driver(data).to_dict("records") == [
        {"driver": "Ali Hassan", "avg_rating": 4.3, "total_ratings": 3},
        {"driver": "driver #7", "avg_rating": 3.0, "total_ratings": 1},
    ]


def test_payment_status_counts(make_data):
    data = make_data(payments="TicketId,PaymentStatus\n1,Completed\n2,\n3,Pending\n4,Completed\n")
    assert payment_status_counts(data).to_dict("records") == [
        {"name": "Completed", "value": 2},
        {"name": "unspecified", "value": 1},
        {"name": "Pending", "value": 1},
    ]


def test_payment_summary_accepts_arabic_labels(make_data):
    data = make_data(payments="TicketId,PaymentStatus\n1,مكتمل\n2,Completed\n3,معلق\n4,Failed\n")
    assert payment_summary(data) == {"total_payments": 4, "completed": 2, "pending": 1}


def test_recent_bookings(make_data):
    rows = "\n".join(f"{i},{i + 100},7,{i},{1 if i % 2 else 0}" for i in range(1, 13))
    data = make_data(bookings="Id,PassengerId,TripId,SeatNumber,Status\n" + rows + "\n")
    df = recent_bookings(data)
    assert len(df) == 10
    assert df["Id"].tolist() == list(range(1, 11))
    assert df["status_label"].tolist()[:2] == ["Confirmed", "Cancelled"]


def test_recent_ratings(make_data):
    data = make_data(
        users="Id,FName,LName\n1,Ali,Hassan\n",
        ratings="RatingId,DriverId,TripId,RatingValue,Comment\n"
        "1,1,10,4,Nice\n2,2,11,5,\n3,1,10,3,\n4,1,10,2,\n5,1,10,1,\n6,1,10,5,\n",
    )
    df = recent_ratings(data)
    assert len(df) == 5
    first = df.iloc[0]
    assert first["driver"] == "Ali Hassan"
    assert first["stars"] == "★★★★☆"
    assert first["comment"] == "Nice"
    assert df.iloc[1]["driver"] == "driver #2"
    assert pd.isna(df.iloc[1]["comment"])
    assert df["comment"].dtype == object


def test_stars_clamps():
    assert stars(7) == "★★★★★"
    assert stars(None) == "☆☆☆☆☆"
    assert stars(float("nan")) == "☆☆☆☆☆"


def test_all_empty_datasets_render_zeroes(make_data):
    data = make_data()
    assert overview_stats(data)["total_revenue"] == 0
    for df in (bookings_by_trip(data), revenue_by_route(data), ratings_by_driver(data), payment_status_counts(data)):
        assert df.empty


def test_aggregations_are_idempotent_and_pure(scenario):
    before = {k: v.copy() for k, v in scenario.items()}
    for fn in (bookings_by_trip, revenue_by_route, ratings_by_driver, payment_status_counts):
        pd.testing.assert_frame_equal(fn(scenario), fn(scenario))
    assert overview_stats(scenario) == overview_stats(scenario)
    for k, v in before.items():
        pd.testing.assert_frame_equal(scenario[k], v)


def test_boolean_key_never_matches_number(make_data):
    data = make_data(
        payments="TicketId,Amount\n1,10\n",
        tickets="Id,BookingId\ntrue,1\n",
        bookings="Id,TripId\n1,1\n",
        trips="TripId,RouteId\n1,1\n",
        routes="RouteId,StartStationId,EndStationId\n1,1,1\n",
        stations="Id,Name\n1,Cairo\n",
    )
    assert revenue_by_route(data).empty


def test_boolean_trip_id_label(make_data):
    data = make_data(bookings="Id,TripId\n1,true\n2,1\n")
    assert bookings_by_trip(data)["trip"].tolist() == ["Trip true", "Trip 1"]


def test_stars_lights_partial_star():
    assert stars(3.5) == "★★★★☆"
    assert stars(0.2) == "★☆☆☆☆"
    assert stars(-1) == "☆☆☆☆☆"


def test_driver_without_names_falls_back_to_id(make_data):
    data = make_data(users="Id,UserType,FName,LName\n4,1,,\n5,1,Mona,\n")
    assert driver_name(data["users"], 4) == "driver #4"
    assert driver_name(data["users"], 5) == "Mona"
