"""
Traffic-source comparison chart.
"""

from typing import List

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from models.schemas import TrafficRecord, TRAFFIC_SOURCE_LABELS

CHART_COLORS = ["#00BFFF", "#1E90FF", "#4682B4"]  # DeepSkyBlue, DodgerBlue, SteelBlue


def traffic_frame(records: List[TrafficRecord]) -> pd.DataFrame:
    """Long format: one row per (competitor, source)."""
    rows = [
        {"Concorrente": r.competitor, "Fonte": source, "Tráfego (%)": value}
        for r in records
        for source, value in r.sources.items()
    ]
    return pd.DataFrame(rows, columns=["Concorrente", "Fonte", "Tráfego (%)"])


def traffic_chart(records: List[TrafficRecord]) -> go.Figure:
    df = traffic_frame(records)
    fig = px.bar(
        df,
        x="Fonte",
        y="Tráfego (%)",
        color="Concorrente",
        barmode="group",
        category_orders={"Fonte": TRAFFIC_SOURCE_LABELS},
        color_discrete_sequence=CHART_COLORS,
        title="Comparativo de Fontes de Tráfego",
    )
    # Shares are percentages
    fig.update_yaxes(range=[0, 100], ticksuffix="%")
    fig.update_layout(height=380, legend_title="Concorrente")
    return fig
