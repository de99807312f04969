"""

███████ ██ ███    ███ ██    ██ ██       █████  ████████ ██  ██████  ███    ██          ██████  ██████  ██████  ███████    ██████  ██    ██ 
██      ██ ████  ████ ██    ██ ██      ██   ██    ██    ██ ██    ██ ████   ██         ██      ██    ██ ██   ██ ██         ██   ██  ██  ██  
███████ ██ ██ ████ ██ ██    ██ ██      ███████    ██    ██ ██    ██ ██ ██  ██         ██      ██    ██ ██████  █████      ██████    ████   
     ██ ██ ██  ██  ██ ██    ██ ██      ██   ██    ██    ██ ██    ██ ██  ██ ██         ██      ██    ██ ██   ██ ██         ██         ██    
███████ ██ ██      ██  ██████  ███████ ██   ██    ██    ██  ██████  ██   ████ ███████  ██████  ██████  ██   ██ ███████ ██ ██         ██    
                                                                                                                                           
                                                                                                                                           
Core simulation logic and main training loop management.
Contains the population engine: spawning a generation, the per-tick
sense/think/move/score loop, and the rebuild that runs once every car is gone.
"""

import enum
import logging

import torch

from .ai_models import Net
from .car import Car
from .config import TrainingConfig
from .evolution import breed_next_generation, calc_fitness, load_best_genome, save_best_genome, seed_population
from .raycast import SensorModel
from .track import Track

logger = logging.getLogger(__name__)


class GenerationState(enum.Enum):
    ALIVE = "alive"
    EXTINCT = "extinct"


class SimStats:
    def __init__(self):
        self.num_cars_alive = 0
        self.fitness = []  # best fitness of every finished generation
        self.generation_count = 0
        self.max_current_score = 0.0


class Settings:
    def __init__(self, save_best_genome=False):
        self.start_next_generation = False
        self.restart_sim = False
        self.save_best_genome = save_best_genome


class SimulationCore:
    """Population engine state, created once and mutated only by tick().

    ``environment`` is the outside world. It must provide
    ``spawn(generator)``, ``despawn()``, ``spawn_point(generator)``,
    ``step(dt)``, ``cast_ray(origin, direction, max_length)`` and
    ``collides(x, y)``. Defaults to the headless Track.
    """

    def __init__(self, config=None, environment=None, generator=None):
        self.config = config if config is not None else TrainingConfig()
        self.config.validate()

        if generator is None:
            generator = torch.Generator()
            if self.config.seed is not None:
                generator.manual_seed(self.config.seed)
            else:
                generator.seed()
        self.generator = generator

        self.sensor_model = SensorModel(
            self.config.num_rays,
            self.config.ray_spread_degrees,
            self.config.ray_start_degrees,
            self.config.ray_max_range,
            self.config.ray_length_policy,
            self.config.ray_hit_scale,
        )
        self.environment = environment if environment is not None else Track()
        self.stats = SimStats()
        self.settings = Settings(self.config.save_best_genome)

        self.cars = []
        self.best_car = None
        self.max_distance_travelled = 0.0
        self.tick_count = 0

        self.spawn_generation(self._initial_brains())

    def _initial_brains(self):
        if not self.config.load_saved_genome:
            return None
        genome, loaded = load_best_genome(
            self.config.layer_sizes,
            self.config.best_genome_path,
            self.config.activation,
            self.generator,
        )
        if not loaded:
            return None
        return seed_population(
            genome,
            self.config.population_size,
            self.config.mutation_rate,
            self.config.mutation_strength,
            self.generator,
        )

    @property
    def alive_cars(self):
        return [car for car in self.cars if car.alive]

    @property
    def state(self):
        return GenerationState.ALIVE if any(car.alive for car in self.cars) else GenerationState.EXTINCT

    def spawn_generation(self, brains=None):
        """Respawn the environment and one car per brain (fresh random brains if None)."""
        if brains is not None and len(brains) != self.config.population_size:
            raise ValueError(f"Expected {self.config.population_size} brains, got {len(brains)}")

        self.environment.spawn(self.generator)
        self.cars = []
        for i in range(self.config.population_size):
            x, y, heading = self.environment.spawn_point(self.generator)
            if brains is None:
                brain = Net(self.config.layer_sizes, activation=self.config.activation, generator=self.generator)
            else:
                brain = brains[i]
            self.cars.append(Car(x, y, brain=brain, heading=heading))

        self.best_car = None
        self.tick_count = 0
        self.stats.num_cars_alive = len(self.cars)
        self.stats.max_current_score = 0.0

    def tick(self):
        """Advance the simulation one step. Returns the state after the step."""
        if self.settings.restart_sim:
            self.restart()
        if self.settings.start_next_generation:
            self.settings.start_next_generation = False
            for car in self.alive_cars:
                car.crash()

        decision_kwargs = self.config.decision_kwargs()
        moved = self.alive_cars
        for car in moved:
            car.update_sensors(self.sensor_model, self.environment.cast_ray)
            car.think(**decision_kwargs)
            car.move(self.config.time_step)
        self.environment.step(self.config.time_step)

        for car in moved:
            self._update_fitness(car)
            if self.environment.collides(car.x, car.y):
                car.crash()

        self.tick_count += 1
        if self.config.max_generation_ticks and self.tick_count >= self.config.max_generation_ticks:
            for car in self.alive_cars:
                car.crash()

        self.stats.num_cars_alive = len(self.alive_cars)
        if self.stats.num_cars_alive == 0:
            self.next_generation()
        return self.state

    def _update_fitness(self, car):
        fitness = calc_fitness(
            car.y,
            self.config.fitness_threshold,
            self.config.fitness_normalization,
            self.config.fitness_floor,
        )
        car.fitness = max(car.fitness, fitness)
        if self.best_car is None or car is self.best_car or car.fitness > self.best_car.fitness:
            self.best_car = car
            self.stats.max_current_score = car.fitness
            self.max_distance_travelled = car.y

    def next_generation(self):
        """Breed the next generation from every car of the current one and respawn.

        Raises DegenerateGenePool if no car earned a positive fitness; the
        current generation is left in place in that case.
        """
        fitnesses = [car.fitness for car in self.cars]
        old_brains = [car.brain for car in self.cars]
        best_brain = self.best_car.brain if self.best_car is not None else None

        max_fitness, new_brains = breed_next_generation(
            fitnesses,
            old_brains,
            self.config.population_size,
            self.config.mutation_rate,
            self.config.mutation_strength,
            self.generator,
        )

        self.environment.despawn()
        self.cars = []

        self.stats.generation_count += 1
        self.stats.fitness.append(max_fitness)
        logger.info("Generation %d evolved! Best fitness: %.2f", self.stats.generation_count, max_fitness)

        if self.settings.save_best_genome and best_brain is not None:
            save_best_genome(best_brain, self.config.best_genome_path)

        self.spawn_generation(new_brains)

    def request_next_generation(self):
        self.settings.start_next_generation = True

    def restart(self):
        """Drop all progress and start again from random brains."""
        self.settings.restart_sim = False
        self.settings.start_next_generation = False
        self.environment.despawn()
        self.stats = SimStats()
        self.max_distance_travelled = 0.0
        self.spawn_generation()
        logger.info("Simulation restarted with %d fresh cars", len(self.cars))

    def run(self, generations):
        """Tick until ``generations`` more generations have finished."""
        target = self.stats.generation_count + generations
        while self.stats.generation_count < target:
            self.tick()
        return self.stats

    def snapshot(self):
        best = self.best_car
        return {
            "generation": self.stats.generation_count,
            "tick": self.tick_count,
            "num_cars_alive": self.stats.num_cars_alive,
            "max_current_score": self.stats.max_current_score,
            "fitness": list(self.stats.fitness),
            "max_distance_travelled": self.max_distance_travelled,
            "best_nn_outputs": [list(layer) for layer in best.nn_outputs] if best is not None else [],
            "best_ray_inputs": list(best.ray_inputs) if best is not None else [],
        }
