"""
Headless training entry point.

    python -m evodrive --generations 20 --seed 1 --save-best
"""

import argparse
import logging
import sys

from .config import TrainingConfig
from .exceptions import DegenerateGenePool
from .simulation_core import SimulationCore

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(prog="evodrive", description="Evolve ray-cast driving agents on a headless track.")
    parser.add_argument("--config", help="JSON file with TrainingConfig overrides")
    parser.add_argument("--generations", type=int, default=10, help="generations to run (default: 10)")
    parser.add_argument("--population", type=int, help="cars per generation")
    parser.add_argument("--seed", type=int, help="seed for every random draw")
    parser.add_argument("--save-best", action="store_true", help="save the best genome after each generation")
    parser.add_argument("--load-best", action="store_true", help="seed the first generation from the saved genome")
    parser.add_argument("--genome-path", help="where the best genome is saved/loaded")
    parser.add_argument("--max-ticks", type=int, help="force a generation to end after this many ticks")
    parser.add_argument("--log-level", default="INFO", help="logging level (default: INFO)")
    return parser


def config_from_args(args):
    config = TrainingConfig.from_json(args.config) if args.config else TrainingConfig()
    if args.population is not None:
        config.population_size = args.population
    if args.seed is not None:
        config.seed = args.seed
    if args.save_best:
        config.save_best_genome = True
    if args.load_best:
        config.load_saved_genome = True
    if args.genome_path:
        config.best_genome_path = args.genome_path
    if args.max_ticks is not None:
        config.max_generation_ticks = args.max_ticks
    return config


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = config_from_args(args)
        sim = SimulationCore(config)
    except (OSError, ValueError) as e:
        logger.error("Could not start simulation: %s", e)
        return 2

    logger.info(
        "Training %d cars, layers %s, %d generations",
        config.population_size,
        config.layer_sizes,
        args.generations,
    )
    target = sim.stats.generation_count + args.generations
    while sim.stats.generation_count < target:
        try:
            sim.tick()
        except DegenerateGenePool as e:
            logger.error("Gene pool collapsed after generation %d: %s", sim.stats.generation_count, e)
            sim.restart()
            target = args.generations

    best = max(sim.stats.fitness) if sim.stats.fitness else 0.0
    print(f"Finished {sim.stats.generation_count} generations - best fitness {best:.2f}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
