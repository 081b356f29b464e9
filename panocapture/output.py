"""
Writing captured images, run manifests, and the end-of-run summary.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, List, Tuple

import pandas as pd

from panocapture.capture import CaptureDefaults, build_capture_params

if TYPE_CHECKING:
    from panocapture.sampler import SampleResult

logger = logging.getLogger(__name__)


class ImageDirectorySink:
    """Saves images as <directory>/<name>.jpg."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def write(self, name: str, data: bytes) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = (self.directory / f"{name}.jpg").resolve()
        path.write_bytes(data)
        return path


def result_to_dataframe(result: SampleResult, defaults: CaptureDefaults) -> pd.DataFrame:
    """One row per saved image with the parameters it was captured with."""
    records = []
    for img in result.images:
        params = build_capture_params(img.coord, defaults)
        records.append({
            "path": str(img.path),
            "candidate_index": img.index,
            "lat": img.coord.lat,
            "lng": img.coord.lng,
            "heading": params.heading,
            "pitch": params.pitch,
            "fov": params.fov,
            "width": params.requested_size.width,
            "height": params.requested_size.height,
            "fit": params.fit,
            "mode": params.mode,
        })
    return pd.DataFrame(records)


def save_manifest(result: SampleResult, defaults: CaptureDefaults, manifest_stem: Path) -> Tuple[Path, Path]:
    """
    Save the run manifest as CSV and JSON next to each other.

    Returns:
        Tuple of (csv_path, json_path).
    """
    df = result_to_dataframe(result, defaults)
    manifest_stem = Path(manifest_stem)
    manifest_stem.parent.mkdir(parents=True, exist_ok=True)

    csv_path = manifest_stem.with_suffix(".csv")
    json_path = manifest_stem.with_suffix(".json")
    df.to_csv(csv_path, index=False)
    df.to_json(json_path, orient="records", indent=2)

    logger.info(f"Saved manifest for {len(df)} images to {csv_path}")
    return csv_path, json_path


def log_summary(result: SampleResult, mode: str) -> None:
    """Log a summary banner of the run. stdout is kept for output paths."""
    lines: List[str] = [
        "=" * 60,
        f"STREET VIEW CAPTURE ({mode}) RESULTS",
        "=" * 60,
        f"Requested images:            {result.requested}",
        f"Produced images:             {result.produced}",
        f"Candidates attempted:        {len(result.visited)}",
        f"Candidates skipped:          {len(result.failures)}",
    ]
    counts = result.failure_counts()
    if counts:
        lines.append("Skipped by reason:")
        for reason, n in counts.most_common():
            lines.append(f"  {reason:<25} {n}")
    lines.append("=" * 60)
    for line in lines:
        logger.info(line)
