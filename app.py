import logging

import pandas as pd
import streamlit as st

from analysis import (
    bookings_by_trip,
    overview_stats,
    payment_status_counts,
    payment_summary,
    ratings_by_driver,
    recent_bookings,
    recent_ratings,
    revenue_by_route,
)
from charts import (
    bookings_by_trip_chart,
    payment_status_chart,
    ratings_by_driver_chart,
    revenue_by_route_chart,
)
from constants import APP_ICON, APP_TITLE, CURRENCY, DATA_BASE, DATASET_FILES, LOG_LEVEL, VIEWS
from utils import badge, load_datasets, source_kind, synth_datasets, upload_override

st.set_page_config(page_title=APP_TITLE, page_icon=APP_ICON, layout="wide")
logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

# Pill-style view selector
st.markdown(
    """
    <style>
      .pill-group > div[role="radiogroup"] { display: flex; flex-wrap: wrap; gap: 10px; }
      .pill-group label {
        border: 1px solid #2563eb;
        color: #1d4ed8;
        border-radius: 9999px;
        padding: 6px 14px;
        background: #fff;
        font-weight: 600;
      }
      .pill-group [role="radio"][aria-checked="true"] {
        background: linear-gradient(90deg, #60a5fa, #2563eb);
        border-color: #2563eb;
        color: #fff;
      }
      .rating-card { border-bottom: 1px solid #e5e7eb; padding: 8px 0 12px 0; }
      .rating-stars { color: #f59e0b; letter-spacing: 2px; }
    </style>
    """,
    unsafe_allow_html=True,
)

st.title(f"{APP_ICON} {APP_TITLE}")

# ============================================================
#  DATA INPUTS
# ============================================================
with st.sidebar:
    st.header("Data")
    base = st.text_input("Data location (folder or URL)", value=DATA_BASE)
    use_synth = st.checkbox("Use synthetic sample data", value=False)
    with st.expander("Upload CSV overrides (optional)"):
        uploads = {entity: upload_override(entity) for entity in DATASET_FILES}

if use_synth:
    data, failed = synth_datasets(), []
else:
    with st.spinner("Loading data…"):
        data, failed = load_datasets(base)

data = dict(data)
failed = list(failed)
uploaded = False
for entity, (df, _) in uploads.items():
    if df is not None:
        data[entity] = df
        uploaded = True
        if entity in failed:
            failed.remove(entity)

badge(source_kind(use_synth, uploaded), failed)

# ============================================================
#  AGGREGATES
# ============================================================
stats = overview_stats(data)

if "view" not in st.session_state:
    st.session_state["view"] = VIEWS[0]

with st.container():
    st.markdown('<div class="pill-group">', unsafe_allow_html=True)
    view = st.radio(
        "view_pills",
        options=VIEWS,
        index=VIEWS.index(st.session_state["view"]),
        horizontal=True,
        label_visibility="collapsed",
        key="view_radio",
    )
    st.markdown("</div>", unsafe_allow_html=True)
    st.session_state["view"] = view

st.divider()

# ============================================================
#  OVERVIEW
# ============================================================
if view == "Overview":
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Total users", stats["total_users"])
    c1.caption(f"{stats['drivers']} drivers, {stats['passengers']} passengers")
    c2.metric("Total trips", stats["total_trips"])
    c2.caption("scheduled trips")
    c3.metric("Total revenue", f"{stats['total_revenue']:,.0f} {CURRENCY}")
    c3.caption(f"from {stats['total_bookings']} bookings")
    c4.metric("Average rating", f"{stats['avg_rating']:.1f}")
    c4.caption(f"from {stats['total_ratings']} ratings")

    st.subheader("Revenue by route")
    st.plotly_chart(revenue_by_route_chart(revenue_by_route(data)), use_container_width=True)

# ============================================================
#  BOOKINGS
# ============================================================
elif view == "Bookings":
    st.subheader("Bookings by trip")
    st.plotly_chart(bookings_by_trip_chart(bookings_by_trip(data)), use_container_width=True)

    st.subheader("Recent bookings")
    table = recent_bookings(data).rename(
        columns={
            "Id": "Booking",
            "PassengerId": "Passenger",
            "TripId": "Trip",
            "SeatNumber": "Seat",
            "status_label": "Status",
        }
    )
    st.dataframe(table, use_container_width=True, hide_index=True)

# ============================================================
#  PAYMENTS
# ============================================================
elif view == "Payments":
    st.subheader("Payment status")
    st.plotly_chart(payment_status_chart(payment_status_counts(data)), use_container_width=True)

    summary = payment_summary(data)
    p1, p2, p3 = st.columns(3)
    p1.metric("Total payments", summary["total_payments"])
    p2.metric("Completed payments", summary["completed"])
    p3.metric("Pending payments", summary["pending"])

# ============================================================
#  RATINGS
# ============================================================
elif view == "Ratings":
    st.subheader("Average rating by driver")
    st.plotly_chart(ratings_by_driver_chart(ratings_by_driver(data)), use_container_width=True)

    st.subheader("Latest ratings")
    latest = recent_ratings(data)
    if latest.empty:
        st.info("No ratings yet.")
    for r in latest.to_dict("records"):
        left, right = st.columns([4, 1])
        with left:
            st.markdown(f"**{r['driver']}**")
            score = f" ({r['rating']:g}/5)" if pd.notna(r["rating"]) else ""
            st.markdown(f'<span class="rating-stars">{r["stars"]}</span>{score}', unsafe_allow_html=True)
            if pd.notna(r["comment"]) and r["comment"]:
                st.write(r["comment"])
        with right:
            st.caption(f"Trip {r['trip_id']}")
        st.markdown('<div class="rating-card"></div>', unsafe_allow_html=True)
