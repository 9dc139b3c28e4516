"""Pure helpers over 2-D point sets (normalized landmark coordinates)."""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class EyeMetrics:
    """Bounding extent of one eye outline."""

    min: tuple
    max: tuple
    center: tuple
    # Distance between the min and max corners
    width: float


def point_range(points) -> EyeMetrics | None:
    """Return min/max corners, centroid and corner distance of a point set.

    Corners are taken per axis, so they need not be actual input points.
    Returns None when there is nothing to measure, or any coordinate is
    not finite.
    """
    if points is None or len(points) == 0:
        return None

    pts = np.asarray(points, dtype=float).reshape(-1, 2)
    if not np.isfinite(pts).all():
        return None
    lo = pts.min(axis=0)
    hi = pts.max(axis=0)
    center = pts.mean(axis=0)

    return EyeMetrics(
        min=(float(lo[0]), float(lo[1])),
        max=(float(hi[0]), float(hi[1])),
        center=(float(center[0]), float(center[1])),
        width=float(np.linalg.norm(hi - lo)),
    )


def polygon_area(points) -> float:
    """Shoelace area of an ordered polygon; winding direction is ignored."""
    if points is None or len(points) < 3:
        return 0.0

    pts = np.asarray(points, dtype=float).reshape(-1, 2)
    x, y = pts[:, 0], pts[:, 1]
    # np.roll wraps the last vertex back to the first
    signed = np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y)
    return float(abs(signed) / 2.0)
