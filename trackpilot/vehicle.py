"""
Vehicle physics, control decoding and fitness for the driving simulation.

Heading convention: angle 0 points "up" (-y) and grows clockwise, so a car
moves by (-sin(angle), -cos(angle)) * speed every step.
"""
import math

from trackpilot.constants import (
    ACCELERATION, AI_CAR_SIZE, BACKWARD_PROGRESS_WEIGHT, CIRCUIT, CRUISE_FORWARD,
    CRUISE_SPEED, DEFAULT_HEADING, DEFAULT_MAX_SPEED, DISTANCE_WEIGHT, FORWARD_FLOOR,
    FORWARD_PROGRESS_WEIGHT, FORWARD_SPEED_WEIGHT, FRICTION, FRONT_CLEAR_OFFSET,
    HARD_TURN_DIFF, HARD_TURN_PENALTY, HIDDEN_LAYERS, KINEMATIC_INPUTS, LOOKAHEAD_T,
    MIN_AI_SPEED, MOVING_BONUS, MOVING_SPEED, OUTPUT_COUNT, PROGRESS_SEARCH_RANGE,
    PROGRESS_SEARCH_STEP, RECOVERY_FORWARD, RECOVERY_SPEED, REVERSE_SPEED_WEIGHT,
    REVERSE_THRESHOLD, SAFE_CLEARANCE, SAFETY_BONUS, SMOOTH_TURN_BONUS, SMOOTH_TURN_DIFF,
    SMOOTHING_FACTOR, SPEED_BAND, SPEED_BAND_BONUS, STALL_SPEED, STEER_CONFLICT_THRESHOLD,
    STEER_MAX, STEER_TIE_DAMPING, STEER_TIE_MARGIN, STEER_WEAK_DAMPING, STOPPED_PENALTY,
    STRAIGHT_DISTANCE_WEIGHT, STRAIGHT_SURVIVAL_WEIGHT, SURVIVAL_WEIGHT, TRAFFIC_CAR_SIZE,
    TURN_RATE, TURN_SPEED_BIAS,
)
from trackpilot.geometry import polygon_touches_segment, polys_intersect
from trackpilot.nn_evolution import NeuralNetwork
from trackpilot.raycast import Sensor


class Controls:
    """Actuation signals, each a float in [0, 1]."""

    def __init__(self):
        self.forward = 0.0
        self.left = 0.0
        self.right = 0.0
        self.reverse = 0.0


def _smooth(previous, raw):
    # Exponential moving average; an idle channel snaps straight to the new value
    if not previous:
        return raw
    return previous * SMOOTHING_FACTOR + raw * (1 - SMOOTHING_FACTOR)


class Vehicle:
    """Kinematic state and footprint shared by every car."""

    invincible = False

    def __init__(self, x, y, width, height, angle=0.0):
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        self.angle = angle
        self.speed = 0.0
        self.damaged = False

        self.fitness = 0.0
        self.distance_traveled = 0.0
        self.time_alive = 0

        self.polygon = self.create_polygon()

    def create_polygon(self):
        rad = math.hypot(self.width, self.height) / 1.5
        alpha = math.atan2(self.width, self.height)
        return [
            (self.x - math.sin(self.angle - alpha) * rad, self.y - math.cos(self.angle - alpha) * rad),
            (self.x - math.sin(self.angle + alpha) * rad, self.y - math.cos(self.angle + alpha) * rad),
            (self.x - math.sin(math.pi + self.angle - alpha) * rad,
             self.y - math.cos(math.pi + self.angle - alpha) * rad),
            (self.x - math.sin(math.pi + self.angle + alpha) * rad,
             self.y - math.cos(math.pi + self.angle + alpha) * rad),
        ]

    def assess_damage(self, road_borders, obstacles):
        if self.invincible:
            return False
        for border in road_borders:
            if polygon_touches_segment(self.polygon, border):
                return True
        for poly in obstacles:
            if polys_intersect(self.polygon, poly):
                return True
        return False


class TrafficCar(Vehicle):
    """Scripted car that follows one lane at a fixed track speed. Never damaged."""

    invincible = True

    def __init__(self, road, lane_index, t=0.0, track_speed=0.01, width=TRAFFIC_CAR_SIZE[0],
                 height=TRAFFIC_CAR_SIZE[1]):
        self.lane_index = lane_index
        self.t = t
        self.track_speed = track_speed
        x, y = road.get_lane_center(lane_index, t)
        super().__init__(x, y, width, height)
        self.angle = self.heading_on_track(road)
        self.polygon = self.create_polygon()

    def heading_on_track(self, road):
        """Face the lane position a little further along the track."""
        next_x, next_y = road.get_lane_center(self.lane_index, self.t + LOOKAHEAD_T)
        dx = next_x - self.x
        dy = next_y - self.y
        if math.hypot(dx, dy) > 0.001:
            return math.atan2(-dx, -dy)
        return DEFAULT_HEADING

    def update(self, road):
        self.t += self.track_speed
        if road.circuit_length:
            self.t %= road.circuit_length

        self.x, self.y = road.get_lane_center(self.lane_index, self.t)
        self.angle = self.heading_on_track(road)
        self.polygon = self.create_polygon()


class AICar(Vehicle):
    """Learning car: sensor fan in, neural network out."""

    def __init__(self, x, y, width=AI_CAR_SIZE[0], height=AI_CAR_SIZE[1],
                 max_speed=DEFAULT_MAX_SPEED, angle=0.0, t=0.0, lane_index=None,
                 brain=None, rng=None):
        super().__init__(x, y, width, height, angle)
        self.max_speed = max_speed
        self.acceleration = ACCELERATION
        self.friction = FRICTION

        self.sensor = Sensor(self)
        input_count = self.sensor.ray_count + KINEMATIC_INPUTS
        if brain is None:
            brain = NeuralNetwork([input_count, *HIDDEN_LAYERS, OUTPUT_COUNT], rng)
        elif brain.input_count != input_count:
            raise ValueError(f"Brain takes {brain.input_count} inputs, sensor provides {input_count}")
        self.brain = brain
        self.controls = Controls()

        # Track progress bookkeeping (closed circuits only)
        self.t = t
        self.lane_index = lane_index
        self.progress_forward = 0.0
        self.progress_backward = 0.0
        self.forward_distance = 0.0

    def update(self, road, traffic):
        obstacles = [car.polygon for car in traffic]
        self.sensor.update(road.borders, obstacles)
        if self.damaged:
            return

        self.apply_outputs(self.brain.feedforward(self.get_inputs()))

        prev_x, prev_y = self.x, self.y
        self.move()
        self.polygon = self.create_polygon()
        self.damaged = self.assess_damage(road.borders, obstacles)
        if not self.damaged:
            self.update_fitness(road, prev_x, prev_y)

    def get_inputs(self):
        normalized_speed = self.speed / self.max_speed
        normalized_angle = (self.angle % CIRCUIT) / CIRCUIT
        return self.sensor.proximity_inputs() + [normalized_speed, normalized_angle]

    def apply_outputs(self, outputs):
        """Turn raw network activations into smoothed actuation signals."""
        raw_forward = max(FORWARD_FLOOR, (outputs[0] + 1) / 2)
        raw_left = max(0.0, outputs[1])
        raw_right = max(0.0, outputs[2])
        raw_reverse = max(0.0, (outputs[3] + 1) / 2 - REVERSE_THRESHOLD)

        controls = self.controls
        controls.forward = _smooth(controls.forward, raw_forward)
        controls.left = _smooth(controls.left, raw_left)
        controls.right = _smooth(controls.right, raw_right)
        controls.reverse = _smooth(controls.reverse, raw_reverse)

        if controls.left > STEER_CONFLICT_THRESHOLD and controls.right > STEER_CONFLICT_THRESHOLD:
            if abs(controls.left - controls.right) < STEER_TIE_MARGIN:
                controls.left *= STEER_TIE_DAMPING
                controls.right *= STEER_TIE_DAMPING
            elif controls.left > controls.right:
                controls.right *= STEER_WEAK_DAMPING
                controls.left = min(controls.left, STEER_MAX)
            else:
                controls.left *= STEER_WEAK_DAMPING
                controls.right = min(controls.right, STEER_MAX)

        if controls.forward > CRUISE_FORWARD and self.speed > CRUISE_SPEED:
            controls.reverse = 0.0

        # Nudge a crawling car forward unless something is right in front of it
        if self.speed < RECOVERY_SPEED and self.sensor.front_clear(FRONT_CLEAR_OFFSET):
            controls.forward = max(controls.forward, RECOVERY_FORWARD)
            controls.reverse = 0.0

    def move(self):
        self.speed += self.acceleration * self.controls.forward
        self.speed -= self.acceleration * self.controls.reverse
        self.speed = max(-self.max_speed / 2, min(self.speed, self.max_speed))

        if self.speed > 0:
            self.speed -= self.friction
        elif self.speed < 0:
            self.speed += self.friction

        # Never let a driven car settle at rest
        if abs(self.speed) < self.friction:
            self.speed = STALL_SPEED
        elif 0 < self.speed < MIN_AI_SPEED:
            self.speed = MIN_AI_SPEED

        flip = 1 if self.speed > 0 else -1
        turn_rate = TURN_RATE * min(abs(self.speed) / self.max_speed + TURN_SPEED_BIAS, 1)
        self.angle += turn_rate * flip * (self.controls.left - self.controls.right)

        self.x -= math.sin(self.angle) * self.speed
        self.y -= math.cos(self.angle) * self.speed

    def update_track_parameter(self, road):
        """Re-estimate t by sampling every lane around the last known t."""
        closest_t = self.t
        min_distance = math.inf
        samples = int(round(PROGRESS_SEARCH_RANGE / PROGRESS_SEARCH_STEP))

        for k in range(-samples, samples + 1):
            test_t = (self.t + k * PROGRESS_SEARCH_STEP) % CIRCUIT
            for lane in range(road.lane_count):
                lane_x, lane_y = road.get_lane_center(lane, test_t)
                distance = math.hypot(self.x - lane_x, self.y - lane_y)
                if distance < min_distance:
                    min_distance = distance
                    closest_t = test_t

        self.t = closest_t
        return closest_t

    def update_fitness(self, road, prev_x, prev_y):
        self.time_alive += 1
        moved = math.hypot(self.x - prev_x, self.y - prev_y)
        self.distance_traveled += moved

        if not road.is_curved:
            # Only ground gained up the corridor counts
            self.forward_distance += max(0.0, prev_y - self.y)
            self.fitness = (self.time_alive * STRAIGHT_SURVIVAL_WEIGHT
                            + self.forward_distance * STRAIGHT_DISTANCE_WEIGHT)
            return

        prev_t = self.t
        self.update_track_parameter(road)
        delta = self.t - prev_t
        # Crossing the start line must not look like a full lap backwards
        if delta < -math.pi:
            delta += CIRCUIT
        elif delta > math.pi:
            delta -= CIRCUIT

        if delta > 0:
            self.progress_forward += delta
            self.forward_distance += moved
        else:
            self.progress_backward -= delta

        self.fitness = self.track_fitness()

    def track_fitness(self):
        fitness = (self.time_alive * SURVIVAL_WEIGHT
                   + self.forward_distance * DISTANCE_WEIGHT
                   + self.progress_forward * FORWARD_PROGRESS_WEIGHT
                   - self.progress_backward * BACKWARD_PROGRESS_WEIGHT)

        if self.speed > 0:
            fitness += self.speed * FORWARD_SPEED_WEIGHT
        else:
            fitness += self.speed * REVERSE_SPEED_WEIGHT

        steer_diff = abs(self.controls.left - self.controls.right)
        if steer_diff > HARD_TURN_DIFF:
            fitness += HARD_TURN_PENALTY
        if steer_diff < SMOOTH_TURN_DIFF:
            fitness += SMOOTH_TURN_BONUS

        if SPEED_BAND[0] < self.speed < SPEED_BAND[1]:
            fitness += SPEED_BAND_BONUS
        fitness += MOVING_BONUS if self.speed > MOVING_SPEED else STOPPED_PENALTY

        if self.sensor.mean_clearance() > SAFE_CLEARANCE:
            fitness += SAFETY_BONUS
        return fitness
