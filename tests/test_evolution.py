from collections import Counter

import pytest
import torch

from evodrive.ai_models import Net
from evodrive.evolution import GenePool, breed_next_generation, calc_fitness, create_gene_pool, seed_population
from evodrive.exceptions import DegenerateGenePool


def test_single_positive_fitness_dominates():
    pool = GenePool([0, 0, 5, 0])
    draws = pool.sample(10000, torch.Generator().manual_seed(0))
    assert len(draws) == 10000
    assert set(draws) == {2}


def test_equal_fitness_is_roughly_uniform():
    pool = GenePool([1, 1, 1, 1])
    counts = Counter(pool.sample(10000, torch.Generator().manual_seed(1)))
    assert set(counts) == {0, 1, 2, 3}
    for index in range(4):
        assert 2300 < counts[index] < 2700


def test_sampling_follows_weights():
    pool = GenePool([1.0, 3.0])
    counts = Counter(pool.sample(20000, torch.Generator().manual_seed(2)))
    assert 0.72 < counts[1] / 20000 < 0.78


@pytest.mark.parametrize("fitnesses", [[0, 0, 0], [], [0.0], [-1.0, 2.0]])
def test_degenerate_gene_pool(fitnesses):
    with pytest.raises(DegenerateGenePool):
        create_gene_pool(fitnesses)


def test_create_gene_pool_reports_max():
    max_fitness, pool = create_gene_pool([0.1, 2.5, 1.0])
    assert max_fitness == 2.5
    assert len(pool) == 3


def test_calc_fitness():
    assert calc_fitness(0.0) == 0.1
    assert calc_fitness(600.0) == 0.1
    assert calc_fitness(680.0) == pytest.approx(2.0)
    assert calc_fitness(700.0, threshold=600.0, normalization=100.0) == pytest.approx(7.0)


def test_breed_clones_selected_parent():
    gen = torch.Generator().manual_seed(3)
    brains = [Net([4, 3, 2], generator=gen) for _ in range(4)]
    parent_layers = brains[2].layers

    max_fitness, children = breed_next_generation([0, 0, 5, 0], brains, 6, mutation_rate=0.0, generator=gen)
    assert max_fitness == 5
    assert len(children) == 6
    assert all(child.layers == parent_layers for child in children)
    assert len({id(child) for child in children}) == 6
    assert all(child is not brains[2] for child in children)


def test_breed_children_are_independent():
    gen = torch.Generator().manual_seed(4)
    brains = [Net([4, 3, 2], generator=gen)]
    parent_layers = brains[0].layers
    _, children = breed_next_generation([1.0], brains, 3, mutation_rate=0.0, generator=gen)

    children[0].mutate(mutation_rate=1.0, generator=gen)
    assert brains[0].layers == parent_layers
    assert children[1].layers == parent_layers
    assert children[0].layers != parent_layers


def test_breed_mutates_children():
    gen = torch.Generator().manual_seed(5)
    brains = [Net([4, 3, 2], generator=gen)]
    parent_layers = brains[0].layers
    _, children = breed_next_generation([1.0], brains, 2, generator=gen)
    assert all(child.layers != parent_layers for child in children)


def test_breed_rejects_mismatched_lengths():
    with pytest.raises(ValueError):
        breed_next_generation([1.0, 2.0], [Net([2, 2])], 2)


def test_breed_surfaces_degenerate_pool():
    with pytest.raises(DegenerateGenePool):
        breed_next_generation([0.0, 0.0], [Net([2, 2]), Net([2, 2])], 2)


def test_seed_population_keeps_original_first():
    gen = torch.Generator().manual_seed(6)
    genome = Net([4, 3, 2], generator=gen)
    brains = seed_population(genome, 5, generator=gen)
    assert len(brains) == 5
    assert brains[0].layers == genome.layers
    assert brains[0] is not genome
    assert all(brain.layers != genome.layers for brain in brains[1:])
