"""


███████ ██    ██  ██████  ██      ██    ██ ████████ ██  ██████  ███    ██    ██████  ██    ██ 
██      ██    ██ ██    ██ ██      ██    ██    ██    ██ ██    ██ ████   ██    ██   ██  ██  ██  
█████   ██    ██ ██    ██ ██      ██    ██    ██    ██ ██    ██ ██ ██  ██    ██████    ████   
██       ██  ██  ██    ██ ██      ██    ██    ██    ██ ██    ██ ██  ██ ██    ██         ██    
███████   ████    ██████  ███████  ██████     ██    ██  ██████  ██   ████ ██ ██         ██    
                                                                                              
                                                                                              

Evolution and population management for the AI driving simulation.
Contains fitness scoring, the fitness-weighted gene pool, next-generation
breeding and best-genome saving/loading.
"""

import logging
import os

import torch

from .ai_models import Net
from .constants import *
from .exceptions import DegenerateGenePool

logger = logging.getLogger(__name__)


def calc_fitness(y, threshold=FITNESS_PROGRESS_THRESHOLD, normalization=FITNESS_NORMALIZATION, floor=FITNESS_FLOOR):
    """Progress along the track, or a small floor until the car gets going."""
    if y <= threshold:
        return floor
    return max(floor, y / normalization)


class GenePool:
    """Discrete distribution picking genome ``i`` proportionally to ``weights[i]``."""

    def __init__(self, weights):
        weights = torch.as_tensor(list(weights), dtype=torch.float64)
        if weights.numel() == 0:
            raise DegenerateGenePool("Failed to generate gene pool: no genomes")
        if bool((weights < 0).any()) or not bool(torch.isfinite(weights).all()):
            raise DegenerateGenePool(f"Failed to generate gene pool: invalid weights {weights.tolist()}")
        if float(weights.sum()) <= 0.0:
            raise DegenerateGenePool("Failed to generate gene pool: every fitness is zero")
        self.weights = weights

    def __len__(self):
        return self.weights.numel()

    def sample(self, n=1, generator=None):
        """Draw ``n`` indices with replacement."""
        return torch.multinomial(self.weights, n, replacement=True, generator=generator).tolist()


def create_gene_pool(fitnesses):
    """Returns ``(max_fitness, gene_pool)``; max fitness of nothing is 0."""
    fitnesses = list(fitnesses)
    max_fitness = 0.0
    for f in fitnesses:
        if f > max_fitness:
            max_fitness = f
    return max_fitness, GenePool(fitnesses)


def breed_next_generation(
    fitnesses,
    brains,
    population_size=POPULATION_SIZE,
    mutation_rate=BRAIN_MUTATION_RATE,
    mutation_strength=BRAIN_MUTATION_VARIATION,
    generator=None,
):
    """Resample ``population_size`` parents by fitness, clone and mutate each.

    Every child is its own deep copy, so mutating one never touches the
    parent or a sibling. Returns ``(max_fitness, new_brains)``.
    """
    if len(fitnesses) != len(brains):
        raise ValueError(f"Got {len(fitnesses)} fitnesses for {len(brains)} brains")

    max_fitness, gene_pool = create_gene_pool(fitnesses)
    new_brains = []
    for brain_idx in gene_pool.sample(population_size, generator):
        child = brains[brain_idx].clone()
        child.mutate(mutation_rate, mutation_strength, generator)
        new_brains.append(child)
    return max_fitness, new_brains


def save_best_genome(net, path=BEST_GENOME_PATH):
    """Write ``net`` to ``path``. Returns False (and logs) if the write fails."""
    try:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, "wb") as f:
            f.write(net.serialize())
    except OSError as e:
        logger.error("Error saving genome to %s: %s", path, e)
        return False

    logger.info("Best genome saved to %s", path)
    return True


def load_best_genome(layer_sizes, path=BEST_GENOME_PATH, activation=ACTIVATION, generator=None):
    return Net.load_matching_shape(path, layer_sizes, activation=activation, generator=generator)


def seed_population(genome, population_size, mutation_rate=BRAIN_MUTATION_RATE, mutation_strength=BRAIN_MUTATION_VARIATION, generator=None):
    """First brain is ``genome`` unchanged, the rest are mutated clones of it."""
    brains = [genome.clone()]
    while len(brains) < population_size:
        child = genome.clone()
        child.mutate(mutation_rate, mutation_strength, generator)
        brains.append(child)
    return brains[:population_size]
