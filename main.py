"""
Headless runner: evolve a population of AI cars on the oval or straight track.

    python main.py --track curved --generations 10 --steps 1500 --seed 7
"""
import argparse

from trackpilot.constants import BRAIN_FILE, DEFAULT_STEPS_PER_GENERATION, DEFAULT_VIEWPORT
from trackpilot.evolution import discard_brain, load_brain, save_brain
from trackpilot.simulation import SimulationCore


def build_parser():
    parser = argparse.ArgumentParser(description="Evolve neural network drivers on a track.")
    parser.add_argument("--track", choices=("curved", "straight"), default="curved", help="Track layout")
    parser.add_argument("--population", type=int, default=None, help="Cars per generation")
    parser.add_argument("--generations", type=int, default=5, help="Number of generations to run")
    parser.add_argument("--steps", type=int, default=DEFAULT_STEPS_PER_GENERATION,
                        help="Maximum steps per generation")
    parser.add_argument("--width", type=int, default=DEFAULT_VIEWPORT[0], help="Viewport width")
    parser.add_argument("--height", type=int, default=DEFAULT_VIEWPORT[1], help="Viewport height")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--brain", default=BRAIN_FILE, help="JSON file holding the best brain")
    parser.add_argument("--fresh", action="store_true", help="Ignore any saved brain")
    parser.add_argument("--discard", action="store_true", help="Delete the saved brain and exit")
    parser.add_argument("--no-traffic", action="store_true", help="Run without scripted traffic")
    parser.add_argument("--export-torch", default=None, help="Also export the best brain as a .pth file")
    parser.add_argument("--import-torch", default=None,
                        help="Seed the first generation from a .pth brain instead of --brain")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    if args.discard:
        discard_brain(args.brain)
        return None

    if args.fresh:
        brain = None
    elif args.import_torch:
        from trackpilot.nn_driver import import_brain
        brain = import_brain(args.import_torch)
    else:
        brain = load_brain(args.brain)
    sim = SimulationCore(track_type=args.track, width=args.width, height=args.height,
                         population_size=args.population, brain=brain, seed=args.seed,
                         with_traffic=not args.no_traffic)

    champion = None
    for _ in range(args.generations):
        sim.run_generation(args.steps)
        champion = sim.evolve()

    if champion is not None:
        save_brain(champion.brain, args.brain)
        if args.export_torch:
            from trackpilot.nn_driver import export_brain
            export_brain(champion.brain, args.export_torch)
    return champion


def run(argv=None):
    """Console entry point: train, then exit with status 0."""
    main(argv)
    return 0


if __name__ == "__main__":
    run()
