"""
Constants and settings for the track driving simulation
"""
import math

# Track settings
DEFAULT_LANE_COUNT = 3
DEFAULT_ROAD_WIDTH = 200
STRAIGHT_ROAD_INFINITY = 1000000
TRACK_HEIGHT_RATIO = 0.38    # arc radius relative to viewport height
LONG_STRAIGHT_RATIO = 0.48   # distance between arc centres relative to viewport width
ARC_SEGMENTS = 30            # straight pieces per semicircle edge
CIRCUIT = 2 * math.pi
DEFAULT_VIEWPORT = (1280, 720)

# Sensor settings
RAY_COUNT = 9
RAY_LENGTH = 180
RAY_SPREAD = math.pi * 0.75

# Network settings: inputs are RAY_COUNT + 2 kinematic channels
KINEMATIC_INPUTS = 2
HIDDEN_LAYERS = (16, 10)
OUTPUT_COUNT = 4  # forward, left, right, reverse

# Driving physics settings
ACCELERATION = 0.17
FRICTION = 0.05
DEFAULT_MAX_SPEED = 3.0
CURVED_MAX_SPEED = 2.9
MIN_AI_SPEED = 0.2
STALL_SPEED = 0.4
TURN_RATE = 0.02
TURN_SPEED_BIAS = 0.3
DEFAULT_HEADING = -math.pi / 2  # facing right

# Control decoding
FORWARD_FLOOR = 0.2
REVERSE_THRESHOLD = 0.8
SMOOTHING_FACTOR = 0.7
STEER_CONFLICT_THRESHOLD = 0.2
STEER_TIE_MARGIN = 0.15
STEER_TIE_DAMPING = 0.5
STEER_WEAK_DAMPING = 0.3
STEER_MAX = 0.9
CRUISE_FORWARD = 0.6
CRUISE_SPEED = 1.5
RECOVERY_SPEED = 0.3
RECOVERY_FORWARD = 0.6
FRONT_CLEAR_OFFSET = 0.4

# Track progress estimation (local search around the last known t)
PROGRESS_SEARCH_RANGE = 0.3
PROGRESS_SEARCH_STEP = 0.02
LOOKAHEAD_T = 0.01

# Fitness weights, curved track. Backward progress must cost more than
# forward progress earns.
SURVIVAL_WEIGHT = 3
DISTANCE_WEIGHT = 12
FORWARD_PROGRESS_WEIGHT = 1500
BACKWARD_PROGRESS_WEIGHT = 3000
FORWARD_SPEED_WEIGHT = 8
REVERSE_SPEED_WEIGHT = 100
HARD_TURN_DIFF = 0.6
HARD_TURN_PENALTY = -10
SMOOTH_TURN_DIFF = 0.3
SMOOTH_TURN_BONUS = 5
SPEED_BAND = (1.2, 2.6)
SPEED_BAND_BONUS = 25
MOVING_SPEED = 0.5
MOVING_BONUS = 20
STOPPED_PENALTY = -15
SAFE_CLEARANCE = 0.3
SAFETY_BONUS = 10

# Fitness weights, straight track
STRAIGHT_SURVIVAL_WEIGHT = 1
STRAIGHT_DISTANCE_WEIGHT = 10

# Population settings
CURVED_POPULATION = 50
STRAIGHT_POPULATION = 1000
BEST_MARGIN = 0.05
# (fraction of population, mutation strength); index 0 is never mutated
MUTATION_TIERS = ((0.1, 0.05), (0.3, 0.15), (1.0, 0.25))
DEFAULT_STEPS_PER_GENERATION = 1500

# Car footprints (width, height)
AI_CAR_SIZE = (28, 50)
TRAFFIC_CAR_SIZE = (30, 50)
STRAIGHT_START_Y = 100

# Scripted traffic presets
CURVED_TRAFFIC = (
    # (lane, t, angular speed per step)
    (0, 0.0, 0.003),
    (1, math.pi / 4, 0.004),
    (2, math.pi / 2, 0.0023),
    (0, 3 * math.pi / 4, 0.0025),
    (1, math.pi, 0.0045),
    (2, 5 * math.pi / 4, 0.003),
    (1, 3 * math.pi / 2, 0.004),
)
STRAIGHT_TRAFFIC = (
    # (lane, t, distance per step)
    (0, 300, 1.9),
    (2, 300, 1.9),
    (1, 100, 1.9),
)

# Persistence
BRAIN_FILE = "best_brain.json"

# Randomness; None draws fresh entropy
SEED = None
