"""
Estimate store: user-entered labelled ranges kept sorted by id.

Edits coming from free-text inputs never fail. Unparseable ids become 0,
unparseable numbers become 0.0, and updating an id that is not in the
store creates a zero-valued record for it.
"""

import logging
import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterator, List, Optional, Union

import pandas as pd

from . import config

logger = logging.getLogger(__name__)

EstimateId = Union[int, str]


@dataclass(frozen=True)
class Estimate:
    id: int
    description: str
    min: float
    max: float


class EstimateField(Enum):
    DESCRIPTION = "description"
    MIN = "min"
    MAX = "max"


def parse_id(value: EstimateId) -> int:
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        logger.debug("Unparseable estimate id %r, using 0", value)
        return 0


def parse_float(text: str) -> float:
    """Parse a min/max input; anything that is not a finite number gives 0.0."""
    try:
        value = float(str(text).strip())
    except ValueError:
        logger.debug("Unparseable number %r, using 0.0", text)
        return 0.0
    if not math.isfinite(value):
        logger.debug("Non-finite number %r, using 0.0", text)
        return 0.0
    return value


def placeholder(estimate_id: int) -> Estimate:
    return Estimate(id=estimate_id, description="", min=0.0, max=0.0)


class EstimateStore:
    """Ordered collection of estimates with a monotonically increasing id counter."""

    def __init__(self, estimates: Optional[List[Estimate]] = None, counter: int = 0):
        self._estimates: List[Estimate] = sorted(estimates or [], key=lambda e: e.id)
        ids = self.ids()
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate estimate ids: {ids}")
        self.counter = max([counter] + ids)

    def copy(self) -> "EstimateStore":
        return EstimateStore(list(self._estimates), counter=self.counter)

    @classmethod
    def with_placeholder(cls) -> "EstimateStore":
        """Store as created at application startup: one "void" entry, counter at 0."""
        void = Estimate(id=0, description=config.PLACEHOLDER_DESCRIPTION, min=0.0, max=0.0)
        return cls([void], counter=0)

    def __iter__(self) -> Iterator[Estimate]:
        return iter(self._estimates)

    def __len__(self) -> int:
        return len(self._estimates)

    def ids(self) -> List[int]:
        return [e.id for e in self._estimates]

    def get(self, estimate_id: EstimateId) -> Optional[Estimate]:
        key = parse_id(estimate_id)
        for estimate in self._estimates:
            if estimate.id == key:
                return estimate
        return None

    def add(self) -> Estimate:
        low, high = config.DEFAULT_ESTIMATE_RANGE
        estimate = Estimate(id=self.counter + 1, description="", min=low, max=high)
        self._estimates.append(estimate)
        self.counter += 1
        self._sort()
        logger.debug("Added estimate %d", estimate.id)
        return estimate

    def remove(self, estimate_id: EstimateId) -> None:
        key = parse_id(estimate_id)
        before = len(self._estimates)
        self._estimates = [e for e in self._estimates if e.id != key]
        if len(self._estimates) != before:
            logger.debug("Removed estimate %d", key)

    def update(self, estimate_id: EstimateId, field: Union[EstimateField, str], value: str) -> Estimate:
        key = parse_id(estimate_id)
        field = EstimateField(field)

        matching = [e for e in self._estimates if e.id == key]
        rest = [e for e in self._estimates if e.id != key]
        if matching:
            current = matching[0]
        else:
            logger.debug("Estimate %d not found, updating a blank record", key)
            current = placeholder(key)
            # Later adds must not hand out the fabricated id again.
            self.counter = max(self.counter, key)

        if field is EstimateField.DESCRIPTION:
            changed = replace(current, description=str(value))
        elif field is EstimateField.MIN:
            changed = replace(current, min=parse_float(value))
        else:
            changed = replace(current, max=parse_float(value))

        self._estimates = rest + [changed]
        self._sort()
        return changed

    def to_frame(self) -> pd.DataFrame:
        rows: List[Dict[str, object]] = [
            {"id": e.id, "description": e.description, "min": e.min, "max": e.max}
            for e in self._estimates
        ]
        return pd.DataFrame(rows, columns=["id", "description", "min", "max"])

    def _sort(self) -> None:
        self._estimates.sort(key=lambda e: e.id)
