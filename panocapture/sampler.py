"""
Random sampling of candidate coordinates until enough images exist.

Candidates are visited in a random order without replacement. A failed
attempt (no imagery, network error, timeout, bad image) is logged and
skipped; the run continues until `count` images are written or the pool
runs out. Falling short is reported once, for the whole batch.
"""

from __future__ import annotations

import logging
import random
import time
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from panocapture.coordinates import Coordinate
from panocapture.errors import CaptureError, ShortfallError
from panocapture.output import ImageDirectorySink
from panocapture.utils.geo_utils import format_number

logger = logging.getLogger(__name__)


def shuffle_indices(length: int, rng: Optional[random.Random] = None) -> List[int]:
    """Return a uniformly random permutation of range(length) (Fisher-Yates)."""
    rng = rng or random.Random()
    indices = list(range(length))
    for i in range(length - 1, 0, -1):
        j = rng.randrange(i + 1)
        indices[i], indices[j] = indices[j], indices[i]
    return indices


def build_base_name(prefix: Optional[str], coord: Coordinate, number: int) -> str:
    """
    Output file stem for the number-th success (1-based).

    With a prefix: '<prefix>_<number>'. Otherwise '<lat>_<lng>_<epoch ms>'.
    """
    if prefix:
        return f"{prefix}_{number}"
    return f"{format_number(coord.lat)}_{format_number(coord.lng)}_{int(time.time() * 1000)}"


@dataclass
class CapturedImage:
    path: Path
    coord: Coordinate
    index: int  # position in the candidate list


@dataclass
class SampleResult:
    """Outcome of one sampling run."""
    requested: int
    images: List[CapturedImage] = field(default_factory=list)
    visited: List[int] = field(default_factory=list)
    failures: List[Tuple[int, CaptureError]] = field(default_factory=list)

    @property
    def outputs(self) -> List[Path]:
        return [img.path for img in self.images]

    @property
    def produced(self) -> int:
        return len(self.images)

    @property
    def satisfied(self) -> bool:
        return self.produced >= self.requested

    def failure_counts(self) -> Counter:
        """Failures grouped by exception class name."""
        return Counter(type(err).__name__ for _, err in self.failures)

    def raise_for_shortfall(self) -> None:
        """Raise ShortfallError if fewer images than requested were produced."""
        if not self.satisfied:
            raise ShortfallError(self.produced, self.requested, self.outputs)


def run_sampler(
    candidates: Sequence[Coordinate],
    count: int,
    attempt: Callable[[Coordinate], bytes],
    sink: ImageDirectorySink,
    name_prefix: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> SampleResult:
    """
    Visit candidates in random order, writing successes until count is reached.

    Args:
        candidates: Candidate pool; each is attempted at most once.
        count: Number of images wanted.
        attempt: Produces final image bytes for a coordinate or raises CaptureError.
        sink: Persists each image; write errors abort the run.
        name_prefix: Optional file name prefix (see build_base_name).
        rng: Random source for the visiting order.

    Returns:
        SampleResult. Call raise_for_shortfall() to turn a partial run into an error.
    """
    result = SampleResult(requested=count)

    for idx in shuffle_indices(len(candidates), rng):
        if result.produced >= count:
            break
        coord = candidates[idx]
        result.visited.append(idx)

        try:
            image = attempt(coord)
        except CaptureError as e:
            logger.debug(f"Skipping index {idx}: {e}")
            result.failures.append((idx, e))
            continue

        base_name = build_base_name(name_prefix, coord, result.produced + 1)
        path = sink.write(base_name, image)
        result.images.append(CapturedImage(path=path, coord=coord, index=idx))
        logger.info(f"[{result.produced}/{count}] Saved {path.name} for index {idx}")

    if result.satisfied:
        logger.info(f"Captured {result.produced} images from {len(result.visited)} candidates")
    else:
        logger.warning(
            f"Pool exhausted: {result.produced} of {count} images after "
            f"{len(result.visited)} candidates ({len(result.failures)} failed)"
        )
    return result
