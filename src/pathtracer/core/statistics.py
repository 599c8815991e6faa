"""Render statistics with an associative, commutative merge.

The render kernel records counters per pixel; the host reduces them into a
Statistics record. Records from any partition of the pixels can be merged in
any order and give the same total: counts are summed and the deepest path
is the maximum.

Example:
    >>> from pathtracer.core.statistics import Statistics
    >>> a = Statistics(pixels=1, subpixel_samples=4, path_samples=9, max_depth_reached=2)
    >>> b = Statistics(pixels=1, subpixel_samples=4, path_samples=6, max_depth_reached=3)
    >>> (a + b).max_depth_reached
    3
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, fields

import numpy as np


@dataclass(frozen=True)
class Statistics:
    """Counters describing the work done by a render.

    Attributes:
        pixels: Pixels rendered.
        subpixel_samples: Antialiasing subpixel samples taken.
        path_samples: Path vertices evaluated within the scatter limit.
        intersections: Scene intersection queries issued.
        scatter_events: Material scatter events that produced a new ray.
        max_depth_reached: Deepest path depth evaluated.
    """

    pixels: int = 0
    subpixel_samples: int = 0
    path_samples: int = 0
    intersections: int = 0
    scatter_events: int = 0
    max_depth_reached: int = 0

    def merge(self, other: Statistics) -> Statistics:
        """Combine two records: sums for the counts, max for the depth."""
        return Statistics(
            pixels=self.pixels + other.pixels,
            subpixel_samples=self.subpixel_samples + other.subpixel_samples,
            path_samples=self.path_samples + other.path_samples,
            intersections=self.intersections + other.intersections,
            scatter_events=self.scatter_events + other.scatter_events,
            max_depth_reached=max(self.max_depth_reached, other.max_depth_reached),
        )

    def __add__(self, other: Statistics) -> Statistics:
        if not isinstance(other, Statistics):
            return NotImplemented
        return self.merge(other)

    @classmethod
    def total(cls, records: Iterable[Statistics]) -> Statistics:
        """Merge any number of records, starting from the empty record."""
        result = cls()
        for record in records:
            result = result.merge(record)
        return result

    @classmethod
    def from_arrays(
        cls,
        subpixel_samples: np.ndarray,
        path_samples: np.ndarray,
        intersections: np.ndarray,
        scatter_events: np.ndarray,
        max_depth: np.ndarray,
    ) -> Statistics:
        """Reduce per-pixel counter arrays of equal shape into one record."""
        return cls(
            pixels=int(subpixel_samples.size),
            subpixel_samples=int(subpixel_samples.sum(dtype=np.int64)),
            path_samples=int(path_samples.sum(dtype=np.int64)),
            intersections=int(intersections.sum(dtype=np.int64)),
            scatter_events=int(scatter_events.sum(dtype=np.int64)),
            max_depth_reached=int(max_depth.max()) if max_depth.size else 0,
        )

    def as_dict(self) -> dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def summary(self) -> str:
        """Format a human-readable report with per-pixel averages."""
        pixels = max(self.pixels, 1)
        lines = [
            "Render statistics:",
            f"  Pixels:        {self.pixels}",
            f"  Subpixels:     {self.subpixel_samples} ({self.subpixel_samples / pixels:.2f} per pixel)",
            f"  Samples:       {self.path_samples} ({self.path_samples / pixels:.2f} per pixel)",
            f"  Intersections: {self.intersections} ({self.intersections / pixels:.2f} per pixel)",
            f"  Scatters:      {self.scatter_events} ({self.scatter_events / pixels:.2f} per pixel)",
            f"  Max depth:     {self.max_depth_reached}",
        ]
        return "\n".join(lines)
