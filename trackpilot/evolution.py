"""
Population stepping, best-car selection and generation seeding.
Also saves / loads / discards the champion brain as JSON.
"""
import json
import os

from trackpilot.constants import BEST_MARGIN, BRAIN_FILE, MUTATION_TIERS
from trackpilot.nn_evolution import NeuralNetwork, get_rng


def advance(road, traffic, cars, best=None):
    """
    Advance the world by one step and return the car to follow.

    Traffic moves first so every sensor sees this step's obstacles.
    """
    for car in traffic:
        car.update(road)
    for car in cars:
        car.update(road, traffic)
    return select_best(road, cars, best)


def select_best(road, cars, best=None, margin=BEST_MARGIN):
    if not cars:
        return None

    if not road.is_curved:
        # Furthest up the corridor
        return min(cars, key=lambda car: car.y)

    leader = max(cars, key=lambda car: car.fitness)
    if best is None or leader is best or not any(car is best for car in cars):
        return leader

    # Hysteresis: a challenger has to clearly beat the retained best
    if leader.fitness > best.fitness + margin * abs(best.fitness):
        return leader
    return best


def mutation_rate_for_rank(rank, population_size):
    """Mutation strength for a clone by rank; rank 0 stays an exact copy."""
    if rank == 0:
        return 0.0
    for fraction, amount in MUTATION_TIERS:
        if rank < population_size * fraction:
            return amount
    return MUTATION_TIERS[-1][1]


def seed_population(cars, brain, rng=None):
    """Give every car a clone of brain, mutated more the lower its rank."""
    rng = get_rng(rng)
    for rank, car in enumerate(cars):
        if car.brain.input_count != brain.input_count:
            raise ValueError(
                f"Brain takes {brain.input_count} inputs, car {rank} needs {car.brain.input_count}")
        car.brain = brain.copy()
        amount = mutation_rate_for_rank(rank, len(cars))
        if amount:
            car.brain.mutate(amount, rng)
    return cars


def save_brain(brain, path=BRAIN_FILE):
    """Save a brain to a JSON file"""
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w") as f:
        json.dump(brain.to_dict(), f)
    print(f"Brain saved to {path} - layers {brain.neuron_counts}")
    return path


def load_brain(path=BRAIN_FILE):
    """Load a brain from a JSON file, None if there is no saved brain"""
    if not os.path.exists(path):
        print(f"No saved brain found at {path}")
        return None
    with open(path) as f:
        brain = NeuralNetwork.from_dict(json.load(f))
    print(f"Brain loaded from {path} - layers {brain.neuron_counts}")
    return brain


def discard_brain(path=BRAIN_FILE):
    if os.path.exists(path):
        os.remove(path)
        print(f"Discarded saved brain at {path}")
        return True
    return False
