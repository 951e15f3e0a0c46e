"""
Traffic chart data shaping.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models.schemas import TrafficRecord, TRAFFIC_SOURCE_LABELS
from utils.charts import traffic_chart, traffic_frame


def test_frame_is_long_format():
    records = [TrafficRecord("Acme", 40, 20, 20, 10, 10), TrafficRecord("Globex", 50, 10, 10, 20, 10)]
    df = traffic_frame(records)
    assert len(df) == 10
    assert list(df.columns) == ["Concorrente", "Fonte", "Tráfego (%)"]
    acme = df[df["Concorrente"] == "Acme"]
    assert list(acme["Fonte"]) == TRAFFIC_SOURCE_LABELS
    assert acme["Tráfego (%)"].sum() == 100


def test_chart_has_one_trace_per_competitor():
    fig = traffic_chart([TrafficRecord("Acme", 100), TrafficRecord("Globex", 50, 50)])
    assert [t.name for t in fig.data] == ["Acme", "Globex"]
    assert list(fig.layout.yaxis.range) == [0, 100]
