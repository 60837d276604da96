"""
Monte Carlo sampler: batched rejection sampling against a Gaussian envelope.

Candidates are drawn uniformly from PROPOSAL_INTERVAL, tested against the
standard normal pdf at their offset from the interval midpoint, and mapped
onto the requested range [a, b].

Two modes:
- LEGACY keeps the historical behaviour: one accept/reject draw from a
  constant-seeded generator is shared by every candidate, and every
  candidate is emitted whatever the outcome. The output is effectively
  uniform on [a, b]; the acceptance rate is only reported.
- REJECTION draws a fresh auxiliary value per candidate, drops rejected
  candidates and keeps sampling until exactly `count` samples are accepted.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union

import numpy as np
from scipy.stats import norm

from . import config

logger = logging.getLogger(__name__)

SeedLike = Union[int, np.random.Generator, None]


class SamplerMode(Enum):
    LEGACY = "legacy"
    REJECTION = "rejection"


@dataclass(frozen=True)
class SampleRun:
    samples: np.ndarray
    accepted: int
    proposed: int

    @property
    def acceptance_rate(self) -> float:
        if self.proposed == 0:
            return float("nan")
        return self.accepted / self.proposed


def batch_plan(count: int) -> Tuple[int, int]:
    """
    Return (batch_size, iterations) for a sample budget.

    batch_size is count // BATCH_DIVISOR, raised to 1 for budgets below the
    divisor so small counts do not divide by zero. The realized sample count
    is batch_size * iterations, which can fall short of `count` through
    integer truncation (2999 -> 2 * 1499 = 2998).
    """
    if count <= 0:
        return 0, 0
    batch_size = max(count // config.BATCH_DIVISOR, 1)
    return batch_size, count // batch_size


def envelope_density(x: np.ndarray) -> np.ndarray:
    low, high = config.PROPOSAL_INTERVAL
    midpoint = 0.5 * (low + high)
    return norm.pdf(x - midpoint)


def remap(x: np.ndarray, a: float, b: float) -> np.ndarray:
    """Map proposal-interval values affinely onto [a, b]."""
    low, high = config.PROPOSAL_INTERVAL
    unit = (x - low) / (high - low)
    # Convex form: b - a overflows for far-apart finite bounds.
    mapped = a * (1.0 - unit) + b * unit
    return np.clip(mapped, min(a, b), max(a, b))


def _legacy_aux_draw() -> float:
    # Same value on every call: the generator is re-seeded with a constant.
    return float(np.random.default_rng(config.LEGACY_AUX_SEED).normal())


def _rng(seed: SeedLike) -> np.random.Generator:
    if isinstance(seed, np.random.Generator):
        return seed
    return np.random.default_rng(seed)


def _run_legacy(count: int, a: float, b: float, rng: np.random.Generator) -> SampleRun:
    batch_size, iterations = batch_plan(count)
    low, high = config.PROPOSAL_INTERVAL
    batches = []
    accepted = 0
    for _ in range(iterations):
        x = rng.uniform(low, high, size=batch_size)
        y = _legacy_aux_draw()
        accepted += int(np.count_nonzero(y < envelope_density(x)))
        batches.append(remap(x, a, b))
    samples = np.concatenate(batches) if batches else np.empty(0, dtype=float)
    return SampleRun(samples=samples, accepted=accepted, proposed=batch_size * iterations)


def _run_rejection(count: int, a: float, b: float, rng: np.random.Generator) -> SampleRun:
    batch_size, _ = batch_plan(count)
    low, high = config.PROPOSAL_INTERVAL
    ceiling = float(envelope_density(np.array([0.5 * (low + high)]))[0])
    batches = []
    accepted = 0
    proposed = 0
    while accepted < count:
        x = rng.uniform(low, high, size=batch_size)
        y = rng.uniform(0.0, ceiling, size=batch_size)
        keep = x[y < envelope_density(x)]
        proposed += batch_size
        accepted += keep.size
        batches.append(remap(keep, a, b))
    samples = np.concatenate(batches)[:count] if batches else np.empty(0, dtype=float)
    return SampleRun(samples=samples, accepted=accepted, proposed=proposed)


def sample_run(
    count: int,
    a: float,
    b: float,
    seed: SeedLike = None,
    mode: Union[SamplerMode, str] = SamplerMode.LEGACY,
) -> SampleRun:
    """Draw samples on [a, b] and return them with accept/reject diagnostics."""
    mode = SamplerMode(mode)
    count = int(count)
    rng = _rng(seed)
    if mode is SamplerMode.LEGACY:
        run = _run_legacy(count, a, b, rng)
    else:
        run = _run_rejection(count, a, b, rng)
    logger.info(
        "Sampled %d values on [%g, %g] (mode=%s, acceptance=%.3f)",
        run.samples.size, a, b, mode.value, run.acceptance_rate,
    )
    return run


def sample(
    count: int,
    a: float,
    b: float,
    seed: SeedLike = None,
    mode: Union[SamplerMode, str] = SamplerMode.LEGACY,
) -> np.ndarray:
    return sample_run(count, a, b, seed=seed, mode=mode).samples
