"""
Ray-cast perception: turns a car pose into the normalized distance vector
fed to its network.
"""

import math
from collections import namedtuple

import numpy as np

from .constants import (
    NUM_RAY_CASTS,
    RAYCAST_HIT_SCALE,
    RAYCAST_LENGTH_POLICY,
    RAYCAST_MAX_TOI,
    RAYCAST_SPREAD_ANGLE_DEG,
    RAYCAST_START_ANGLE_DEG,
)

Pose = namedtuple("Pose", ["x", "y", "heading"])

RAY_LENGTH_POLICIES = ("uniform", "cycling")


def build_ray_table(count=NUM_RAY_CASTS, spread_degrees=RAYCAST_SPREAD_ANGLE_DEG, start_degrees=RAYCAST_START_ANGLE_DEG):
    """Pre compute the local ray directions.

    Ray ``i`` points at ``start + i * step`` degrees from the local +x axis,
    with ``step = spread / count + 1``. The returned ``(count, 2)`` array is
    read-only and shared by every car.
    """
    if count < 1:
        raise ValueError(f"Ray count must be positive, got {count}")
    angle_per_ray = spread_degrees / count + 1.0
    angles = np.radians(start_degrees + angle_per_ray * np.arange(count))
    table = np.column_stack((np.cos(angles), np.sin(angles)))
    table.flags.writeable = False
    return table


def ray_lengths(count, max_range=RAYCAST_MAX_TOI, policy=RAYCAST_LENGTH_POLICY):
    if policy == "uniform":
        return [float(max_range)] * count
    if policy == "cycling":
        return [max_range / (i % 3 + 1) for i in range(count)]
    raise ValueError(f"Unknown ray length policy '{policy}', expected one of {RAY_LENGTH_POLICIES}")


def rotate_point(x, y, angle_rad):
    c = math.cos(angle_rad)
    s = math.sin(angle_rad)
    return x * c - y * s, x * s + y * c


def sense(pose, ray_table, max_range, ray_length_policy, cast_fn, hit_scale=RAYCAST_HIT_SCALE):
    """Cast every ray of ``ray_table`` from ``pose`` and normalize the hits.

    ``cast_fn(origin, direction, length)`` returns the hit distance or None.
    A hit reads ``hit_scale * distance / length`` (capped at 1), a miss
    reads 1.0.
    """
    origin = (pose.x, pose.y)
    readings = []
    for (dx, dy), length in zip(ray_table, ray_lengths(len(ray_table), max_range, ray_length_policy)):
        direction = rotate_point(float(dx), float(dy), pose.heading)
        hit = cast_fn(origin, direction, length)
        if hit is None:
            readings.append(1.0)
        else:
            readings.append(min(1.0, hit_scale * hit / length))
    return readings


class SensorModel:
    """Ray table plus range settings, built once at startup."""

    def __init__(
        self,
        num_rays=NUM_RAY_CASTS,
        spread_degrees=RAYCAST_SPREAD_ANGLE_DEG,
        start_degrees=RAYCAST_START_ANGLE_DEG,
        max_range=RAYCAST_MAX_TOI,
        ray_length_policy=RAYCAST_LENGTH_POLICY,
        hit_scale=RAYCAST_HIT_SCALE,
    ):
        if ray_length_policy not in RAY_LENGTH_POLICIES:
            raise ValueError(f"Unknown ray length policy '{ray_length_policy}', expected one of {RAY_LENGTH_POLICIES}")
        self.ray_table = build_ray_table(num_rays, spread_degrees, start_degrees)
        self.max_range = max_range
        self.ray_length_policy = ray_length_policy
        self.hit_scale = hit_scale

    @property
    def num_rays(self):
        return len(self.ray_table)

    def sense(self, pose, cast_fn):
        return sense(pose, self.ray_table, self.max_range, self.ray_length_policy, cast_fn, self.hit_scale)
