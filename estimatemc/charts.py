import io
from typing import Dict, Tuple

import numpy as np
import pandas as pd
import plotly.graph_objects as go
import seaborn as sns

from .estimates import EstimateStore

# Seaborn palette for Plotly
PALETTE = sns.color_palette("deep", 8).as_hex()

SUMMARY_COLUMNS = ["mean", "sd", "min", "p90", "p50", "p10", "max"]


def summarize(x: np.ndarray, exceedance: bool = True) -> Dict[str, float]:
    """
    Summary statistics of a sample sequence.

    With the exceedance convention P10 is the high value (90th percentile)
    and P90 the low value (10th percentile).
    """
    x = np.asarray(x, dtype=float)
    if x.size == 0:
        return {k: float("nan") for k in SUMMARY_COLUMNS}
    if exceedance:
        p10, p90 = np.percentile(x, 90), np.percentile(x, 10)
    else:
        p10, p90 = np.percentile(x, 10), np.percentile(x, 90)
    return {
        "mean": float(np.mean(x)),
        "sd": float(np.std(x, ddof=1)) if x.size > 1 else float("nan"),
        "min": float(np.min(x)),
        "p90": float(p90),
        "p50": float(np.percentile(x, 50)),
        "p10": float(p10),
        "max": float(np.max(x)),
    }


def histogram_figure(
    samples: np.ndarray,
    display_range: Tuple[float, float],
    bucket_count: int,
    pixel_size: int,
    title: str = "Samples",
    exceedance: bool = True,
) -> go.Figure:
    """Histogram of the samples over a fixed display range, with P10/P50/Mean/P90 markers."""
    lo, hi = sorted(display_range)
    fig = go.Figure()
    fig.add_histogram(
        x=samples,
        nbinsx=int(bucket_count),
        name=title,
        marker_color=PALETTE[0],
        opacity=0.85,
        hovertemplate="%{x:.4g}",
    )

    if len(samples):
        stats = summarize(samples, exceedance=exceedance)
        for key, label, color in [("p10", "P10", "red"), ("p50", "P50", "orange"), ("mean", "Mean", "green"), ("p90", "P90", "blue")]:
            val = stats[key]
            fig.add_vline(x=val, line_width=2, line_dash="dash", line_color=color, opacity=0.75)
            fig.add_annotation(
                x=val,
                y=1.02,
                yref="paper",
                xanchor="center",
                showarrow=False,
                text=f"{label}={val:,.3g}",
                font=dict(color=color, size=10),
            )

    fig.update_layout(
        xaxis=dict(range=[lo, hi], title=title),
        yaxis_title="Count",
        margin=dict(l=40, r=50, t=40, b=60),
        height=int(pixel_size),
        bargap=0.02,
        showlegend=False,
    )
    return fig


def samples_frame(samples: np.ndarray) -> pd.DataFrame:
    df = pd.DataFrame({"value": np.asarray(samples, dtype=float)})
    df.insert(0, "Trial", range(1, len(df) + 1))
    return df


def samples_csv(samples: np.ndarray) -> bytes:
    return samples_frame(samples).to_csv(index=False).encode("utf-8")


def export_excel(store: EstimateStore, samples: np.ndarray, exceedance: bool = True) -> bytes:
    """Workbook with the samples, their summary and the estimates table."""
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        samples_frame(samples).to_excel(writer, sheet_name="Samples", index=False)
        summary = pd.DataFrame([summarize(samples, exceedance=exceedance)], columns=SUMMARY_COLUMNS)
        summary.to_excel(writer, sheet_name="Summary Statistics", index=False)
        store.to_frame().to_excel(writer, sheet_name="Estimates", index=False)
    return output.getvalue()
