"""
Geometry primitives for orbital placement.

Provides a small 2D vector class and the circle-on-a-circle packing used to
size every orbit: given the radii of the circles to be placed around an
anchor, compute the smallest shared orbit radius at which no two circles
overlap each other and none of them overlaps the anchor.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field

__all__ = ["Vector2D", "OrbitPacking", "pack_orbit", "chord_length", "normalize_angle"]

TWO_PI = 2.0 * math.pi

# Unit chords below this are treated as coincident positions
_MIN_CHORD = 1e-12


@dataclass
class Vector2D:
    """2D vector for positions and offsets."""

    x: float = 0.0
    y: float = 0.0

    @classmethod
    def from_polar(cls, length: float, angle: float) -> Vector2D:
        """Vector of the given length pointing at *angle* (radians)."""
        return cls(length * math.cos(angle), length * math.sin(angle))

    def __add__(self, other: Vector2D) -> Vector2D:
        return Vector2D(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vector2D) -> Vector2D:
        return Vector2D(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> Vector2D:
        return Vector2D(self.x * scalar, self.y * scalar)

    def __rmul__(self, scalar: float) -> Vector2D:
        return self.__mul__(scalar)

    def __neg__(self) -> Vector2D:
        return Vector2D(-self.x, -self.y)

    def magnitude(self) -> float:
        """Vector length."""
        return math.hypot(self.x, self.y)

    def angle(self) -> float:
        """Direction of the vector in radians, in ``(-pi, pi]``."""
        return math.atan2(self.y, self.x)

    def distance_to(self, other: Vector2D) -> float:
        """Euclidean distance to another point."""
        return (self - other).magnitude()


def normalize_angle(angle: float) -> float:
    """Map an angle into ``[0, 2*pi)``."""
    angle = math.fmod(angle, TWO_PI)
    if angle < 0.0:
        angle += TWO_PI
    return angle


def chord_length(radius: float, angle: float) -> float:
    """Straight-line distance between two points on a circle *angle* apart."""
    delta = normalize_angle(angle)
    delta = min(delta, TWO_PI - delta)
    return 2.0 * radius * math.sin(delta / 2.0)


@dataclass
class OrbitPacking:
    """
    Result of packing circles around an anchor.

    Attributes:
        orbit: Shared distance from the anchor's center to every circle center
        angles: Angle (radians) of each circle center, same order as the input
        shares: Angular share of the full turn assigned to each circle
    """

    orbit: float = 0.0
    angles: list[float] = field(default_factory=list)
    shares: list[float] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.angles)


def pack_orbit(
    child_radii: Sequence[float],
    anchor_radius: float = 0.0,
    padding: float = 0.0,
) -> OrbitPacking:
    """
    Place circles on a shared orbit around an anchor circle.

    Each circle receives an angular share of the full turn proportional to
    its radius, and circle centers sit in the middle of their share, the
    first one at angle 0. The orbit radius is the smallest value that keeps
    every circle clear of the anchor (``orbit >= anchor + r_i``) and every
    pair of circles clear of each other (the chord between their centers is
    at least ``r_i + r_j``). The chord condition is solved in closed form per
    pair from the isosceles triangle formed by two spokes, and the largest
    requirement over all pairs wins.

    Args:
        child_radii: Radii of the circles to place, in placement order
        anchor_radius: Radius of the circle at the orbit's center
        padding: Extra clearance added to every distance constraint

    Returns:
        OrbitPacking with the orbit radius and per-circle angles
    """
    radii = [float(r) for r in child_radii]
    count = len(radii)
    if count == 0:
        return OrbitPacking()

    total = sum(radii)
    if total > 0.0:
        shares = [TWO_PI * r / total for r in radii]
    else:
        shares = [TWO_PI / count] * count

    angles = [0.0]
    for previous, current in zip(shares, shares[1:]):
        angles.append(angles[-1] + (previous + current) / 2.0)

    orbit = anchor_radius + max(radii) + padding
    if count == 1:
        return OrbitPacking(orbit=orbit, angles=angles, shares=shares)

    for i in range(count):
        for j in range(i + 1, count):
            chord = chord_length(1.0, angles[j] - angles[i])
            if chord < _MIN_CHORD:
                continue
            required = (radii[i] + radii[j] + padding) / chord
            orbit = max(orbit, required)

    return OrbitPacking(orbit=orbit, angles=angles, shares=shares)
