"""
Cubic Hermite spline over 3D control points.

Each control point stores a time, a value and the derivative of the value
with respect to time. Evaluation outside the control-point range is clamped
to the nearest end point.
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np


@dataclass
class SplinePoint3:
    """Control point: time, value and d(value)/dt"""
    t: float
    p: np.ndarray
    dp: np.ndarray

    def __post_init__(self):
        self.t = float(self.t)
        self.p = np.asarray(self.p, dtype=float)
        self.dp = np.asarray(self.dp, dtype=float)


class Spline3:
    """
    Piecewise cubic Hermite interpolation of 3D values.

    Preconditions: at least 2 control points, in strictly increasing order of
    ``t``. Evaluating a spline that violates them raises ValueError.
    """

    def __init__(self, points: Sequence[SplinePoint3] = ()):
        self.points: List[SplinePoint3] = list(points)

    @classmethod
    def from_samples(cls, times: Sequence[float], values: np.ndarray) -> 'Spline3':
        """
        Fit a spline through sampled values.

        Derivatives are estimated with central differences (one-sided at the
        ends), which gives a Catmull-Rom style curve.

        Args:
            times: Strictly increasing sample times, at least 2
            values: (N, 3) array of samples

        Returns:
            Spline3 passing through every sample
        """
        times = np.asarray(times, dtype=float)
        values = np.asarray(values, dtype=float)
        if len(times) < 2:
            raise ValueError("at least 2 samples required")
        derivatives = np.gradient(values, times, axis=0)
        return cls([SplinePoint3(t, p, dp) for t, p, dp in zip(times, values, derivatives)])

    def add_point(self, t: float, p, dp):
        self.points.append(SplinePoint3(t, p, dp))

    def min_time(self) -> float:
        return self.points[0].t

    def max_time(self) -> float:
        return self.points[-1].t

    def find_segment(self, t: float) -> Tuple[int, float]:
        """
        Locate the segment containing ``t``.

        ``t`` is first clamped to [min_time(), max_time()].

        Returns:
            (i, t) where points[i].t <= t <= points[i + 1].t and t is the
            clamped time
        """
        n = len(self.points)
        if n < 2:
            raise ValueError(f"spline needs at least 2 control points, has {n}")
        t = max(self.min_time(), min(self.max_time(), t))
        for i in range(n - 1):
            if self.points[i].t <= t <= self.points[i + 1].t:
                return i, t
        # Only reachable when the points are out of order
        return n - 2, t

    def _segment(self, t: float):
        seg, t = self.find_segment(t)
        a, b = self.points[seg], self.points[seg + 1]
        t_range = b.t - a.t
        if t_range <= 0:
            raise ValueError(
                f"control point times must be strictly increasing (t={a.t} then t={b.t})"
            )
        return (t - a.t) / t_range, t_range, a, b

    def get_value(self, t: float) -> np.ndarray:
        """Value of the spline at time ``t``"""
        u, t_range, a, b = self._segment(t)
        u2 = u * u
        u3 = u2 * u
        # Tangents rescaled to the unit parameter
        return ((2 * u3 - 3 * u2 + 1) * a.p
                + (u3 - 2 * u2 + u) * (a.dp * t_range)
                + (-2 * u3 + 3 * u2) * b.p
                + (u3 - u2) * (b.dp * t_range))

    def get_derivative(self, t: float) -> np.ndarray:
        """
        d/dt of the spline at time ``t``.

        The tangent terms are kept in true time, so at a control point the
        result is exactly that point's ``dp``.
        """
        u, t_range, a, b = self._segment(t)
        u2 = u * u
        d_points = ((6 * u2 - 6 * u) * a.p + (-6 * u2 + 6 * u) * b.p) / t_range
        return (d_points
                + (3 * u2 - 4 * u + 1) * a.dp
                + (3 * u2 - 2 * u) * b.dp)

    def sample(self, times: Sequence[float]) -> np.ndarray:
        """Values at each of ``times`` as an (N, 3) array"""
        return np.array([self.get_value(t) for t in times])
