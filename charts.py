import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from constants import BOOKINGS_COLOR, COLORS, CURRENCY, MAX_RATING, RATING_COLOR, REVENUE_COLOR


def revenue_by_route_chart(df: pd.DataFrame) -> go.Figure:
    fig = px.bar(
        df, x="route", y="revenue",
        labels={"route": "Route", "revenue": f"Revenue ({CURRENCY})"},
        title="Revenue by route",
    )
    fig.update_traces(marker_color=REVENUE_COLOR, hovertemplate=f"%{{x}}<br>%{{y}} {CURRENCY}<extra></extra>")
    fig.update_layout(margin=dict(l=10, r=10, t=50, b=10))
    return fig


def bookings_by_trip_chart(df: pd.DataFrame) -> go.Figure:
    fig = px.bar(
        df, x="trip", y="bookings",
        labels={"trip": "Trip", "bookings": "Bookings"},
        title="Bookings by trip",
    )
    fig.update_traces(marker_color=BOOKINGS_COLOR)
    fig.update_layout(margin=dict(l=10, r=10, t=50, b=10))
    return fig


def payment_status_chart(df: pd.DataFrame) -> go.Figure:
    fig = px.pie(
        df, names="name", values="value",
        color_discrete_sequence=COLORS,
        title="Payment status",
    )
    fig.update_traces(textinfo="label+percent")
    return fig


def ratings_by_driver_chart(df: pd.DataFrame) -> go.Figure:
    fig = px.bar(
        df, x="driver", y="avg_rating",
        hover_data={"total_ratings": True},
        labels={"driver": "Driver", "avg_rating": "Average rating", "total_ratings": "Ratings"},
        title="Average rating by driver",
    )
    fig.update_traces(marker_color=RATING_COLOR)
    fig.update_yaxes(range=[0, MAX_RATING])
    fig.update_layout(margin=dict(l=10, r=10, t=50, b=10))
    return fig
