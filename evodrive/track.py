"""
Headless road with obstacles for training without a physics engine.

Provides the two things the population engine needs from the outside world:
a ray-cast query for the sensors and a contact test that removes cars.
Contacts are only detected, never resolved.
"""

import enum

import numpy as np
import torch

from .constants import *


def uniform(low, high, generator=None):
    return torch.empty(1, dtype=torch.float64).uniform_(low, high, generator=generator).item()


def ray_segment_intersect(ray_origin, ray_direction, seg_starts, seg_ends):
    """Distance along the ray to each segment, NaN where there is no hit.

    ``seg_starts`` and ``seg_ends`` are ``(n, 2)`` arrays. ``ray_direction``
    is expected to be a unit vector so the result is a distance.
    """
    x1, y1 = ray_origin
    dx, dy = ray_direction
    x3 = seg_starts[:, 0]
    y3 = seg_starts[:, 1]
    seg_dx = seg_ends[:, 0] - x3
    seg_dy = seg_ends[:, 1] - y3

    # Zero denominator means parallel
    denom = dx * seg_dy - dy * seg_dx
    with np.errstate(divide="ignore", invalid="ignore"):
        t = ((x3 - x1) * seg_dy - (y3 - y1) * seg_dx) / denom
        u = ((x3 - x1) * dy - (y3 - y1) * dx) / denom

    # t must be in front of the ray and u within the segment
    hit = (denom != 0) & (t >= 0) & (u >= 0) & (u <= 1)
    return np.where(hit, t, np.nan)


class EnemyType(enum.Enum):
    SIMPLE = "simple"
    HORIZONTAL = "horizontal"
    TRUCK = "truck"

    @classmethod
    def random(cls, generator=None):
        all_vals = list(cls)
        index = int(torch.randint(len(all_vals), (1,), generator=generator).item())
        return all_vals[index]

    @property
    def half_extents(self):
        return TRUCK_HALF_EXTENTS if self is EnemyType.TRUCK else ENEMY_HALF_EXTENTS


class Enemy:
    def __init__(self, x, y, enemy_type=EnemyType.SIMPLE):
        self.x = x
        self.y = y
        self.enemy_type = enemy_type
        self.half_w, self.half_h = enemy_type.half_extents
        self.direction = 1.0 if enemy_type is EnemyType.HORIZONTAL else 0.0

    def update(self, dt):
        self.y += ENEMY_SPEED * dt
        if self.enemy_type is EnemyType.HORIZONTAL:
            self.x += self.direction * ENEMY_HORIZONTAL_SPEED * dt
            if self.x >= ENEMY_X_MAX:
                self.x = ENEMY_X_MAX - 1.0
                self.direction *= -1.0
            elif self.x <= ENEMY_X_MIN:
                self.x = ENEMY_X_MIN + 1.0
                self.direction *= -1.0

    def contains(self, x, y):
        return abs(x - self.x) <= self.half_w and abs(y - self.y) <= self.half_h


class Track:
    def __init__(self, num_enemies=NUM_ENEMY_CARS):
        self.num_enemies = num_enemies
        self.enemies = []
        self.bound_y = BOUND_START_Y
        self._segments = None

    def spawn(self, generator=None):
        """Place a fresh set of obstacles and reset the bound line."""
        self.enemies = []
        enemy_y = ENEMY_START_Y
        for _ in range(self.num_enemies):
            enemy_type = EnemyType.random(generator)
            x = uniform(ENEMY_X_MIN, ENEMY_X_MAX, generator)
            self.enemies.append(Enemy(x, enemy_y, enemy_type))
            enemy_y += ENEMY_SPACING_Y
        self.bound_y = BOUND_START_Y
        self._segments = None

    def despawn(self):
        self.enemies = []
        self._segments = None

    def spawn_point(self, generator=None):
        return uniform(CAR_SPAWN_X_MIN, CAR_SPAWN_X_MAX, generator), CAR_SPAWN_Y, 0.0

    def step(self, dt=TIME_STEP):
        for enemy in self.enemies:
            enemy.update(dt)
        self.bound_y += BOUND_SPEED
        self._segments = None

    def segments(self):
        """All blocking segments as ``(starts, ends)`` arrays, cached until the next step."""
        if self._segments is not None:
            return self._segments

        starts = [
            (ROAD_X_MIN, self.bound_y),
            (ROAD_X_MAX, self.bound_y),
            (ROAD_X_MIN, TRACK_END_Y),
            (ROAD_X_MIN, self.bound_y),
        ]
        ends = [
            (ROAD_X_MIN, TRACK_END_Y),
            (ROAD_X_MAX, TRACK_END_Y),
            (ROAD_X_MAX, TRACK_END_Y),
            (ROAD_X_MAX, self.bound_y),
        ]
        for enemy in self.enemies:
            x0, x1 = enemy.x - enemy.half_w, enemy.x + enemy.half_w
            y0, y1 = enemy.y - enemy.half_h, enemy.y + enemy.half_h
            starts.extend([(x0, y0), (x1, y0), (x1, y1), (x0, y1)])
            ends.extend([(x1, y0), (x1, y1), (x0, y1), (x0, y0)])

        self._segments = (np.array(starts, dtype=np.float64), np.array(ends, dtype=np.float64))
        return self._segments

    def cast_ray(self, origin, direction, max_length):
        """Nearest hit distance within ``max_length``, or None."""
        starts, ends = self.segments()
        distances = ray_segment_intersect(origin, direction, starts, ends)
        distances = distances[~np.isnan(distances) & (distances <= max_length)]
        if distances.size == 0:
            return None
        return float(distances.min())

    def collides(self, x, y):
        if x <= ROAD_X_MIN or x >= ROAD_X_MAX:
            return True
        if y >= TRACK_END_Y or y <= self.bound_y:
            return True
        return any(enemy.contains(x, y) for enemy in self.enemies)
