"""
Simulation context: one track, its scripted traffic and a population of
learning cars, advanced one synchronous step at a time.
"""
import numpy as np

from trackpilot.constants import (
    CURVED_MAX_SPEED, CURVED_POPULATION, CURVED_TRAFFIC, DEFAULT_HEADING, DEFAULT_LANE_COUNT,
    DEFAULT_MAX_SPEED, DEFAULT_ROAD_WIDTH, DEFAULT_STEPS_PER_GENERATION, DEFAULT_VIEWPORT, SEED,
    STRAIGHT_POPULATION, STRAIGHT_START_Y, STRAIGHT_TRAFFIC,
)
from trackpilot.evolution import advance, seed_population
from trackpilot.road import Road
from trackpilot.vehicle import AICar, TrafficCar


def create_traffic(road):
    """Scripted cars spread over lanes and track positions."""
    presets = CURVED_TRAFFIC if road.is_curved else STRAIGHT_TRAFFIC
    traffic = [TrafficCar(road, lane, t, speed) for lane, t, speed in presets]
    print(f"Created {len(traffic)} traffic cars on the {road.track_type} track")
    return traffic


def generate_cars(road, count, rng=None):
    """AI cars all start from the same spot in the middle lane."""
    lane = road.middle_lane
    cars = []
    for _ in range(count):
        if road.is_curved:
            x, y = road.get_lane_center(lane, 0.0)
            car = AICar(x, y, max_speed=CURVED_MAX_SPEED, angle=DEFAULT_HEADING,
                        t=0.0, lane_index=lane, rng=rng)
        else:
            car = AICar(road.lane_x(lane), STRAIGHT_START_Y, max_speed=DEFAULT_MAX_SPEED,
                        lane_index=lane, rng=rng)
        cars.append(car)
    return cars


class SimulationCore:
    def __init__(self, track_type="curved", width=DEFAULT_VIEWPORT[0], height=DEFAULT_VIEWPORT[1],
                 population_size=None, lane_count=DEFAULT_LANE_COUNT, road_width=DEFAULT_ROAD_WIDTH,
                 brain=None, seed=SEED, with_traffic=True):
        if population_size is None:
            population_size = CURVED_POPULATION if track_type == "curved" else STRAIGHT_POPULATION
        if population_size < 1:
            raise ValueError(f"Population size must be positive, got {population_size}")

        self.rng = np.random.default_rng(seed)
        self.road = Road(width / 2, road_width, lane_count, track_type)
        self.road.update_dimensions(width, height)
        self.population_size = population_size
        self.with_traffic = with_traffic
        self.generation = 0
        self.steps = 0

        self.traffic = []
        self.cars = []
        self.best_car = None
        self.reset(brain)

    def reset(self, brain=None):
        """Fresh traffic and cars; cars inherit brain when one is given."""
        self.traffic = create_traffic(self.road) if self.with_traffic else []
        self.cars = generate_cars(self.road, self.population_size, self.rng)
        if brain is not None:
            seed_population(self.cars, brain, self.rng)
        self.best_car = self.cars[0]
        self.steps = 0

    def resize(self, width, height):
        self.road.update_dimensions(width, height)

    def step(self):
        self.best_car = advance(self.road, self.traffic, self.cars, self.best_car)
        self.steps += 1
        return self.best_car

    @property
    def alive_count(self):
        return sum(1 for car in self.cars if not car.damaged)

    def run_generation(self, max_steps=DEFAULT_STEPS_PER_GENERATION):
        """Step until max_steps or until every car has crashed."""
        for _ in range(max_steps):
            self.step()
            if self.alive_count == 0:
                break
        return self.best_car

    def evolve(self):
        """Start the next generation from the current best brain."""
        champion = self.best_car
        print(f"Generation {self.generation} evolved! Best fitness: {champion.fitness:.2f} "
              f"distance: {champion.distance_traveled:.1f} alive: {self.alive_count}/{len(self.cars)}")
        self.generation += 1
        self.reset(champion.brain.copy())
        return champion
