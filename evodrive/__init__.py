"""
Neuroevolution of ray-cast driving agents.

`ai_models` holds the evolvable network, `raycast` the sensors, `car` the
agent and its decision mapping, `evolution` the gene pool, and
`simulation_core` the population engine that ties them together.
"""

from .ai_models import Net  # noqa: F401
from .car import Car, CarControls, map_decision  # noqa: F401
from .config import TrainingConfig  # noqa: F401
from .evolution import GenePool, breed_next_generation, calc_fitness, create_gene_pool  # noqa: F401
from .exceptions import (  # noqa: F401
    DegenerateGenePool,
    EvoDriveError,
    InputArityMismatch,
    InvalidTopology,
    PersistenceShapeMismatch,
    PersistenceUnavailable,
)
from .raycast import Pose, SensorModel, build_ray_table, sense  # noqa: F401
from .simulation_core import GenerationState, SimulationCore  # noqa: F401

__version__ = "0.1.0"
