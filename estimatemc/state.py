"""
Application state and the event dispatch loop.

All state lives in one AppState record. UI callbacks build an event and pass
it to dispatch(); events are applied one at a time, synchronously.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple, Union

import numpy as np

from . import config
from .estimates import EstimateField, EstimateId, EstimateStore
from .sampler import SampleRun, SamplerMode, sample_run

logger = logging.getLogger(__name__)

_DEFAULTS = config.get_sampling_defaults()


@dataclass
class AppState:
    store: EstimateStore = field(default_factory=EstimateStore.with_placeholder)
    samples: np.ndarray = field(default_factory=lambda: np.empty(0, dtype=float))
    sample_count: int = _DEFAULTS["sample_count"]
    interval: Tuple[float, float] = _DEFAULTS["interval"]
    bucket_count: int = _DEFAULTS["bucket_count"]
    chart_height: int = _DEFAULTS["chart_height"]
    seed: Optional[int] = _DEFAULTS["seed"]
    mode: SamplerMode = SamplerMode.LEGACY
    acceptance_rate: float = float("nan")

    @property
    def display_range(self) -> Tuple[float, float]:
        a, b = self.interval
        return (min(a, b), max(a, b))


# --- Events ---

@dataclass(frozen=True)
class AddEstimate:
    pass


@dataclass(frozen=True)
class RemoveEstimate:
    id: EstimateId


@dataclass(frozen=True)
class UpdateEstimate:
    id: EstimateId
    field: Union[EstimateField, str]
    value: str


@dataclass(frozen=True)
class RequestSamples:
    pass


@dataclass(frozen=True)
class SamplesReady:
    run: SampleRun


@dataclass(frozen=True)
class ChangeSettings:
    sample_count: Optional[int] = None
    interval: Optional[Tuple[float, float]] = None
    bucket_count: Optional[int] = None
    chart_height: Optional[int] = None
    seed: Optional[int] = None
    clear_seed: bool = False
    mode: Optional[Union[SamplerMode, str]] = None


Event = Union[AddEstimate, RemoveEstimate, UpdateEstimate, RequestSamples, SamplesReady, ChangeSettings]


def interval_for(state: AppState, estimate_id: Optional[EstimateId] = None) -> Tuple[float, float]:
    """Sampling interval for an estimate, or the default interval when none is chosen."""
    if estimate_id is None:
        return config.DEFAULT_INTERVAL
    estimate = state.store.get(estimate_id)
    if estimate is None:
        return config.DEFAULT_INTERVAL
    return (estimate.min, estimate.max)


def _apply_settings(state: AppState, event: ChangeSettings) -> AppState:
    changes = {}
    if event.sample_count is not None:
        changes["sample_count"] = min(max(int(event.sample_count), 0), config.MAX_SAMPLE_COUNT)
    if event.interval is not None:
        a, b = event.interval
        changes["interval"] = (float(a), float(b))
    if event.bucket_count is not None:
        changes["bucket_count"] = max(int(event.bucket_count), 1)
    if event.chart_height is not None:
        changes["chart_height"] = max(int(event.chart_height), 1)
    if event.clear_seed:
        changes["seed"] = None
    elif event.seed is not None:
        changes["seed"] = int(event.seed)
    if event.mode is not None:
        changes["mode"] = SamplerMode(event.mode)
    return replace(state, **changes)


def dispatch(state: AppState, event: Event) -> AppState:
    """Apply one event and return the resulting state."""
    if isinstance(event, (AddEstimate, RemoveEstimate, UpdateEstimate)):
        store = state.store.copy()
        if isinstance(event, AddEstimate):
            store.add()
        elif isinstance(event, RemoveEstimate):
            store.remove(event.id)
        else:
            store.update(event.id, event.field, event.value)
        state = replace(state, store=store)
    elif isinstance(event, RequestSamples):
        a, b = state.interval
        run = sample_run(state.sample_count, a, b, seed=state.seed, mode=state.mode)
        state = dispatch(state, SamplesReady(run))
    elif isinstance(event, SamplesReady):
        state = replace(state, samples=event.run.samples, acceptance_rate=event.run.acceptance_rate)
    elif isinstance(event, ChangeSettings):
        state = _apply_settings(state, event)
    else:
        raise ValueError(f"Unknown event: {event!r}")
    return state
