from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List

from . import constants as C


@dataclass
class TrainingConfig:
    population_size: int = C.POPULATION_SIZE
    # Sensors
    num_rays: int = C.NUM_RAY_CASTS
    ray_spread_degrees: float = C.RAYCAST_SPREAD_ANGLE_DEG
    ray_start_degrees: float = C.RAYCAST_START_ANGLE_DEG
    ray_max_range: float = C.RAYCAST_MAX_TOI
    ray_length_policy: str = C.RAYCAST_LENGTH_POLICY
    ray_hit_scale: float = C.RAYCAST_HIT_SCALE
    # Network
    hidden_layers: List[int] = field(default_factory=lambda: [C.NUM_HIDDEN_NODES])
    num_outputs: int = C.NUM_OUTPUT_NODES
    activation: str = C.ACTIVATION
    mutation_rate: float = C.BRAIN_MUTATION_RATE
    mutation_strength: float = C.BRAIN_MUTATION_VARIATION
    # Decision mapping
    steer_threshold: float = C.NN_STEER_THRESHOLD
    throttle_threshold: float = C.NN_W_ACTIVATION_THRESHOLD
    brake_threshold: float = C.NN_S_ACTIVATION_THRESHOLD
    always_throttle: bool = C.ALWAYS_THROTTLE
    use_brake: bool = C.USE_BRAKE
    # Fitness
    fitness_normalization: float = C.FITNESS_NORMALIZATION
    fitness_threshold: float = C.FITNESS_PROGRESS_THRESHOLD
    fitness_floor: float = C.FITNESS_FLOOR
    # Run control
    time_step: float = C.TIME_STEP
    max_generation_ticks: int = C.MAX_GENERATION_TICKS
    save_best_genome: bool = C.SAVE_BEST_GENOME
    load_saved_genome: bool = C.LOAD_SAVED_GENOME
    best_genome_path: str = C.BEST_GENOME_PATH
    seed: int | None = None

    @property
    def layer_sizes(self) -> List[int]:
        return [self.num_rays, *self.hidden_layers, self.num_outputs]

    def decision_kwargs(self) -> Dict[str, Any]:
        return {
            "steer_threshold": self.steer_threshold,
            "throttle_threshold": self.throttle_threshold,
            "brake_threshold": self.brake_threshold,
            "always_throttle": self.always_throttle,
            "use_brake": self.use_brake,
        }

    def validate(self) -> None:
        if self.population_size < 1:
            raise ValueError(f"population_size must be positive, got {self.population_size}")
        if self.num_rays < 1:
            raise ValueError(f"num_rays must be positive, got {self.num_rays}")
        if self.num_outputs < 1 or any(size < 1 for size in self.hidden_layers):
            raise ValueError(f"Empty layers not allowed: {self.layer_sizes}")
        if self.ray_max_range <= 0:
            raise ValueError(f"ray_max_range must be positive, got {self.ray_max_range}")
        if self.max_generation_ticks < 0:
            raise ValueError(f"max_generation_ticks must be >= 0, got {self.max_generation_ticks}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def update_from_mapping(self, data: Dict[str, Any]) -> None:
        """Merge settings from a flat mapping; unknown keys are ignored."""
        known = {f.name for f in fields(self)}
        for key, value in data.items():
            if key in known:
                setattr(self, key, value)

    @classmethod
    def from_json(cls, path) -> "TrainingConfig":
        config = cls()
        config.update_from_mapping(json.loads(Path(path).read_text()))
        return config
