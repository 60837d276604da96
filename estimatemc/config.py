"""
Sampling and chart defaults for EstimateMC.

Plain constants; the Streamlit sidebar overrides the run-time ones
(sample count, buckets, seed) per session.
"""

# Sampling
SAMPLE_COUNT = 10000  # Samples drawn per request
MAX_SAMPLE_COUNT = 2_000_000
BATCH_DIVISOR = 1000  # batch size = count // BATCH_DIVISOR
PROPOSAL_INTERVAL = (-1.0, 1.0)  # Uniform proposal (envelope) support
LEGACY_AUX_SEED = 0  # Constant seed of the legacy accept/reject draw
RANDOM_SEED = None  # Set to int for reproducibility, None for random

# Estimates
DEFAULT_INTERVAL = (0.0, 4.0)  # Used when no estimate is selected
DEFAULT_ESTIMATE_RANGE = (0.0, 10.0)  # Range of a freshly added estimate
PLACEHOLDER_DESCRIPTION = "void"

# Histogram
BUCKET_COUNT = 50
CHART_HEIGHT = 450  # pixels

# Logging
LOG_LEVEL_ENV = "ESTIMATEMC_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_sampling_defaults():
    """Return the default sampling settings of a new session."""
    return {
        "sample_count": SAMPLE_COUNT,
        "interval": DEFAULT_INTERVAL,
        "bucket_count": BUCKET_COUNT,
        "chart_height": CHART_HEIGHT,
        "seed": RANDOM_SEED,
    }
