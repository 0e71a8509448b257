"""
Ray fan sensor mounted on a car.

Each reading is either None (nothing within reach) or a Touch whose offset
is the fraction of the ray length to the nearest obstacle:

    readings = [Touch(offset=0.8), Touch(offset=0.3), None, ...]
    inputs   = [0.2, 0.7, 0, ...]     # 1 - offset, closer is louder
"""
import math

from trackpilot.constants import RAY_COUNT, RAY_LENGTH, RAY_SPREAD
from trackpilot.geometry import get_intersection, lerp, polygon_edges


class Sensor:
    def __init__(self, car, ray_count=RAY_COUNT, ray_length=RAY_LENGTH, ray_spread=RAY_SPREAD):
        self.car = car
        self.ray_count = ray_count
        self.ray_length = ray_length
        self.ray_spread = ray_spread

        self.rays = []
        self.readings = []

    @property
    def front_index(self):
        return self.ray_count // 2

    def update(self, road_borders, obstacles):
        """Cast the fan and record the closest hit for every ray.

        road_borders: iterable of (start, end) segments
        obstacles: iterable of polygons (lists of points) of other cars
        """
        self.cast_rays()
        polygons = [poly for poly in obstacles if poly]
        self.readings = [self.get_reading(ray, road_borders, polygons) for ray in self.rays]

    def get_reading(self, ray, road_borders, polygons):
        start, end = ray
        closest = None

        for border_start, border_end in road_borders:
            touch = get_intersection(start, end, border_start, border_end)
            if touch and (closest is None or touch.offset < closest.offset):
                closest = touch

        for poly in polygons:
            for edge_start, edge_end in polygon_edges(poly):
                touch = get_intersection(start, end, edge_start, edge_end)
                if touch and (closest is None or touch.offset < closest.offset):
                    closest = touch

        return closest

    def cast_rays(self):
        self.rays = []
        for i in range(self.ray_count):
            fraction = 0.5 if self.ray_count == 1 else i / (self.ray_count - 1)
            ray_angle = lerp(self.ray_spread / 2, -self.ray_spread / 2, fraction) + self.car.angle

            start = (self.car.x, self.car.y)
            end = (
                self.car.x - math.sin(ray_angle) * self.ray_length,
                self.car.y - math.cos(ray_angle) * self.ray_length,
            )
            self.rays.append((start, end))
        return self.rays

    def proximity_inputs(self):
        """Network inputs: 0 for a clear ray, approaching 1 as an obstacle gets close."""
        return [0.0 if reading is None else 1 - reading.offset for reading in self.readings]

    def mean_clearance(self):
        """Average hit offset, 1.0 when no ray sees anything."""
        hits = [reading.offset for reading in self.readings if reading is not None]
        if not hits:
            return 1.0
        return sum(hits) / len(hits)

    def front_clear(self, min_offset):
        if not self.readings:
            return True
        front = self.readings[self.front_index]
        return front is None or front.offset > min_offset
