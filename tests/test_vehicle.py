"""
Tests for car physics, control decoding, damage and fitness.
"""
import math

import pytest

from trackpilot.constants import CIRCUIT, DEFAULT_HEADING, STALL_SPEED
from trackpilot.geometry import Touch
from trackpilot.nn_evolution import NeuralNetwork
from trackpilot.road import Road
from trackpilot.vehicle import AICar, TrafficCar, Vehicle

FULL_THROTTLE = (1, -1, -1, -1)


def test_polygon_corners():
    car = Vehicle(0, 0, 30, 50)
    assert car.polygon[0] == pytest.approx((30 / 1.5, -50 / 1.5))
    assert car.polygon[1] == pytest.approx((-30 / 1.5, -50 / 1.5))
    assert car.polygon[2] == pytest.approx((-30 / 1.5, 50 / 1.5))
    assert car.polygon[3] == pytest.approx((30 / 1.5, 50 / 1.5))

    car.angle = -math.pi / 2
    car.polygon = car.create_polygon()
    xs = [x for x, _ in car.polygon]
    assert max(xs) == pytest.approx(50 / 1.5), "Turned car is long along x"


def test_brain_must_match_sensor():
    with pytest.raises(ValueError):
        AICar(0, 0, brain=NeuralNetwork([5, 4]))


def test_decode_floors_and_thresholds():
    car = AICar(0, 0)
    car.speed = 2.0
    car.apply_outputs([-1, -1, -1, 0.5])
    assert car.controls.forward == pytest.approx(0.2), "Forward never drops below the floor"
    assert car.controls.left == 0 and car.controls.right == 0
    assert car.controls.reverse == 0, "Reverse needs a strong activation"

    car = AICar(0, 0)
    car.speed = 1.0
    car.apply_outputs([-1, 0.1, 0.0, 1.0])
    assert car.controls.reverse == pytest.approx(0.2)
    assert car.controls.left == pytest.approx(0.1)


def test_decode_smooths_between_steps():
    car = AICar(0, 0)
    car.speed = 2.0
    car.apply_outputs([-1, -1, -1, -1])
    car.apply_outputs([1, -1, -1, -1])
    assert car.controls.forward == pytest.approx(0.2 * 0.7 + 1.0 * 0.3)


def test_decode_resolves_steering_conflicts():
    car = AICar(0, 0)
    car.speed = 2.0
    car.apply_outputs([0, 0.8, 0.85, -1])
    assert car.controls.left == pytest.approx(0.4)
    assert car.controls.right == pytest.approx(0.425)

    car = AICar(0, 0)
    car.speed = 2.0
    car.apply_outputs([0, 0.95, 0.3, -1])
    assert car.controls.left == pytest.approx(0.9)
    assert car.controls.right == pytest.approx(0.09)


def test_low_speed_recovery_respects_front_ray():
    car = AICar(0, 0)
    car.apply_outputs([-1, -1, -1, 1])
    assert car.controls.forward == pytest.approx(0.6)
    assert car.controls.reverse == 0

    car = AICar(0, 0)
    car.sensor.readings = [None] * car.sensor.ray_count
    car.sensor.readings[car.sensor.front_index] = Touch(0, -10, 0.1)
    car.apply_outputs([-1, -1, -1, 1])
    assert car.controls.forward == pytest.approx(0.2), "Blocked car is not shoved forward"
    assert car.controls.reverse == pytest.approx(0.2)


def test_move_clamps_and_keeps_cars_rolling():
    car = AICar(0, 0, max_speed=3.0)
    car.controls.forward = 1.0
    for _ in range(100):
        car.move()
    assert car.speed == pytest.approx(3.0 - car.friction)
    assert car.y < 0 and car.x == pytest.approx(0), "Heading 0 drives up"

    car = AICar(0, 0)
    car.move()
    assert car.speed == STALL_SPEED, "A car at rest is kicked to the stall speed"

    car = AICar(0, 0, max_speed=3.0)
    car.controls.reverse = 1.0
    for _ in range(100):
        car.move()
    assert car.speed == pytest.approx(-1.5 + car.friction)
    assert car.y > 0


def test_turning_depends_on_speed():
    slow = AICar(0, 0, max_speed=3.0)
    fast = AICar(0, 0, max_speed=3.0)
    slow.speed, fast.speed = 0.5, 2.9
    slow.controls.left = fast.controls.left = 1.0
    slow.move()
    fast.move()
    assert 0 < slow.angle < fast.angle


def test_damage_is_sticky(straight, make_brain):
    # Facing the left wall (heading pi/2 drives towards -x)
    car = AICar(straight.left + 40, 100, angle=math.pi / 2, brain=make_brain(FULL_THROTTLE))
    for _ in range(200):
        car.update(straight, [])
        if car.damaged:
            break
    assert car.damaged, "Car never reached the wall"

    frozen = (car.x, car.y, car.angle, car.speed, car.fitness, car.time_alive)
    for _ in range(20):
        car.update(straight, [])
    assert (car.x, car.y, car.angle, car.speed, car.fitness, car.time_alive) == frozen
    assert car.sensor.readings, "Sensing still runs for a wrecked car"


def test_straight_fitness(straight, make_brain):
    car = AICar(straight.lane_x(1), 100, brain=make_brain(FULL_THROTTLE))
    for _ in range(10):
        car.update(straight, [])
    assert car.forward_distance == pytest.approx(100 - car.y)
    assert car.fitness == pytest.approx(car.time_alive + 10 * car.forward_distance)


def test_driving_down_the_corridor_earns_no_distance(straight, make_brain):
    x = straight.lane_x(1)
    forward = AICar(x, 100, angle=0.0, brain=make_brain(FULL_THROTTLE))
    backward = AICar(x, 100, angle=math.pi, brain=make_brain(FULL_THROTTLE))

    for _ in range(40):
        forward.update(straight, [])
        backward.update(straight, [])

    assert not forward.damaged and not backward.damaged
    assert forward.y < 100 < backward.y
    assert forward.distance_traveled == pytest.approx(backward.distance_traveled)
    assert backward.forward_distance == pytest.approx(0.0, abs=1e-9)
    assert forward.fitness > backward.fitness


def test_forward_progress_beats_reversing_along_the_track(oval, make_brain):
    x, y = oval.get_lane_center(1, 0.0)
    forward = AICar(x, y, angle=-math.pi / 2, t=0.0, lane_index=1, brain=make_brain(FULL_THROTTLE))
    backward = AICar(x, y, angle=math.pi / 2, t=0.0, lane_index=1, brain=make_brain(FULL_THROTTLE))

    for _ in range(40):
        forward.update(oval, [])
        backward.update(oval, [])

    assert not forward.damaged and not backward.damaged
    assert forward.time_alive == backward.time_alive
    assert forward.distance_traveled == pytest.approx(backward.distance_traveled)
    assert forward.progress_forward > 0 and backward.progress_backward > 0
    assert forward.fitness > backward.fitness


def test_crossing_the_start_line_counts_forward(oval, make_brain):
    t0 = CIRCUIT - 0.05
    x, y = oval.get_lane_center(1, t0)
    car = AICar(x, y, angle=-math.pi / 2, t=t0, lane_index=1, brain=make_brain(FULL_THROTTLE))
    for _ in range(40):
        car.update(oval, [])
    assert not car.damaged
    assert car.t < 1.0, f"Car should be past the start line, t={car.t}"
    assert car.progress_backward == 0
    assert car.progress_forward == pytest.approx(car.t + 0.05, abs=0.03)


def test_traffic_follows_its_lane(oval):
    car = TrafficCar(oval, lane_index=2, t=CIRCUIT - 0.002, track_speed=0.004)
    car.update(oval)
    assert car.t == pytest.approx(0.002), "Track parameter wraps after a lap"
    assert (car.x, car.y) == pytest.approx(oval.get_lane_center(2, car.t))

    before = (car.x, car.y)
    car.update(oval)
    dx, dy = car.x - before[0], car.y - before[1]
    heading = (-math.sin(car.angle), -math.cos(car.angle))
    cos_between = (dx * heading[0] + dy * heading[1]) / math.hypot(dx, dy)
    assert cos_between == pytest.approx(1.0, abs=1e-3), "Traffic faces where it drives"


def test_traffic_is_invincible(oval):
    car = TrafficCar(oval, lane_index=1, t=0.0)
    assert not car.assess_damage(oval.borders, [car.polygon])


def test_traffic_heading_falls_back_when_direction_is_degenerate():
    road = Road(640, 200, 3, "curved")
    car = TrafficCar(road, lane_index=1, t=0.5)
    assert car.angle == DEFAULT_HEADING
    assert not math.isnan(car.polygon[0][0])


def test_straight_traffic_drives_up(straight):
    car = TrafficCar(straight, lane_index=1, t=100, track_speed=2.0)
    assert car.angle == pytest.approx(0.0)
    car.update(straight)
    assert (car.x, car.y) == pytest.approx((straight.lane_x(1), -102))
