import logging
import os

import pandas as pd
import streamlit as st

from estimatemc import config
from estimatemc.charts import SUMMARY_COLUMNS, export_excel, histogram_figure, samples_csv, summarize
from estimatemc.estimates import EstimateField
from estimatemc.sampler import SamplerMode, batch_plan
from estimatemc.state import (
    AddEstimate,
    AppState,
    ChangeSettings,
    RemoveEstimate,
    RequestSamples,
    UpdateEstimate,
    dispatch,
    interval_for,
)

logging.basicConfig(
    level=os.environ.get(config.LOG_LEVEL_ENV, "INFO").upper(),
    format=config.LOG_FORMAT,
)
logger = logging.getLogger("estimatemc.app")

st.set_page_config(page_title="EstimateMC", layout="wide")
st.title("EstimateMC – Estimates & Monte Carlo histogram")
# Enlarge primary buttons slightly
st.markdown("""
<style>
div.stButton > button[kind="primary"] {
  font-size: 1.05rem;
  padding: 0.6rem 1.2rem;
}
</style>
""", unsafe_allow_html=True)

if "app_state" not in st.session_state:
    st.session_state.app_state = AppState()


def send(event):
    st.session_state.app_state = dispatch(st.session_state.app_state, event)


def on_field_change(estimate_id: int, field: EstimateField):
    send(UpdateEstimate(str(estimate_id), field, st.session_state[f"{field.value}_{estimate_id}"]))


# --- Sidebar: global controls ---
with st.sidebar:
    st.header("Settings")
    n_samples = st.number_input(
        "Number of Monte Carlo samples", 0, config.MAX_SAMPLE_COUNT, config.SAMPLE_COUNT, step=1000,
        help="Sample budget per request. Batches hold count // 1000 candidates each.",
    )
    seed = st.number_input("Random seed (optional)", value=0, min_value=0, step=1)
    buckets = st.number_input("Histogram buckets", 1, 500, config.BUCKET_COUNT, step=5)
    mode_label = st.radio(
        "Sampler",
        ["Legacy (every candidate kept)", "Rejection (Gaussian envelope)"],
        help="Legacy reproduces the historical output, which is effectively uniform. "
             "Rejection drops candidates above the normal density.",
    )
    show_exceedance = st.toggle("Use exceedance convention (P10=high)", value=True, help="If on: P10 is the 90th percentile.")

    batch_size, iterations = batch_plan(int(n_samples))
    st.caption(f"{iterations} batches × {batch_size} candidates = {batch_size * iterations} proposals")

send(ChangeSettings(
    sample_count=int(n_samples),
    bucket_count=int(buckets),
    seed=int(seed) if seed else None,
    clear_seed=not seed,
    mode=SamplerMode.LEGACY if mode_label.startswith("Legacy") else SamplerMode.REJECTION,
))
state: AppState = st.session_state.app_state

# --- Estimates ---
st.subheader("Estimates")
for estimate in list(state.store):
    cols = st.columns([4, 2, 2, 1])
    with cols[0]:
        st.text_input(
            f"Description ({estimate.id})", value=estimate.description, key=f"description_{estimate.id}",
            on_change=on_field_change, args=(estimate.id, EstimateField.DESCRIPTION),
        )
    with cols[1]:
        st.text_input(
            f"Min ({estimate.id})", value=f"{estimate.min:g}", key=f"min_{estimate.id}",
            on_change=on_field_change, args=(estimate.id, EstimateField.MIN),
        )
    with cols[2]:
        st.text_input(
            f"Max ({estimate.id})", value=f"{estimate.max:g}", key=f"max_{estimate.id}",
            on_change=on_field_change, args=(estimate.id, EstimateField.MAX),
        )
    with cols[3]:
        st.button("Delete", key=f"del_{estimate.id}", on_click=send, args=(RemoveEstimate(str(estimate.id)),))

st.button("Add estimate", on_click=send, args=(AddEstimate(),))

with st.expander("Estimates table", expanded=False):
    st.dataframe(state.store.to_frame(), use_container_width=True)

st.markdown("---")

# --- Sampling ---
st.subheader("Distribution")
options = [None] + state.store.ids()
lo_default, hi_default = config.DEFAULT_INTERVAL


def _format_option(estimate_id):
    if estimate_id is None:
        return f"Default range [{lo_default:g}, {hi_default:g}]"
    estimate = state.store.get(estimate_id)
    label = estimate.description or f"Estimate {estimate_id}"
    return f"{label} [{estimate.min:g}, {estimate.max:g}]"


cols = st.columns([3, 1])
with cols[0]:
    selected = st.selectbox("Sample range from", options, format_func=_format_option)
with cols[1]:
    sample_now = st.button("▶ Sample", type="primary")

if sample_now:
    with st.spinner("Sampling..."):
        try:
            send(ChangeSettings(interval=interval_for(state, selected)))
            send(RequestSamples())
        except ValueError as e:
            logger.exception("Sampling failed")
            st.error(f"Sampling failed: {e}")
    state = st.session_state.app_state

if state.samples.size:
    stats_row = summarize(state.samples, exceedance=show_exceedance)
    metric_cols = st.columns(5)
    for col, (label, key) in zip(metric_cols, [("Mean", "mean"), ("P90", "p90"), ("P50", "p50"), ("P10", "p10"), ("SD", "sd")]):
        with col:
            st.metric(label, f"{stats_row[key]:,.3g}")
    st.caption(
        f"{state.samples.size} samples on [{state.interval[0]:g}, {state.interval[1]:g}] · "
        f"nominal acceptance rate {state.acceptance_rate:.1%}"
    )

    fig = histogram_figure(
        state.samples,
        state.display_range,
        state.bucket_count,
        state.chart_height,
        title=f"Samples on [{state.interval[0]:g}, {state.interval[1]:g}]",
        exceedance=show_exceedance,
    )
    st.plotly_chart(fig, use_container_width=True)

    summary_df = pd.DataFrame([stats_row], columns=SUMMARY_COLUMNS)
    st.dataframe(summary_df, use_container_width=True)

    # Download buttons
    col1, col2 = st.columns(2)
    with col1:
        st.download_button(
            "Download samples as CSV",
            data=samples_csv(state.samples),
            file_name="estimatemc_samples.csv",
            mime="text/csv",
        )
    with col2:
        st.download_button(
            "Download as Excel",
            data=export_excel(state.store, state.samples, exceedance=show_exceedance),
            file_name="estimatemc_results.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )
else:
    st.info("Press **Sample** to draw a distribution.")

st.caption(
    "Tip: Add estimates with a min/max range, pick one as the sampling range and press Sample. "
    "Invalid numbers are read as 0."
)
