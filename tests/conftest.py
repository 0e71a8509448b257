import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import numpy as np
import pytest

from trackpilot.nn_evolution import NeuralNetwork
from trackpilot.road import Road


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def oval():
    road = Road(640, 200, 3, "curved")
    road.update_dimensions(1280, 720)
    return road


@pytest.fixture
def straight():
    return Road(100, 200, 3, "straight")


def forced_brain(outputs, neuron_counts=(11, 16, 10, 4)):
    """Network whose output saturates towards the sign of each entry of outputs."""
    brain = NeuralNetwork(list(neuron_counts), np.random.default_rng(0))
    for level in brain.levels:
        level.weights[:] = 0.0
        level.biases[:] = 0.0
    brain.levels[-1].biases[:] = [10.0 * value for value in outputs]
    return brain


@pytest.fixture
def make_brain():
    return forced_brain
