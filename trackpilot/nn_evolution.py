"""
Feedforward neural network driving the AI cars, evolved by mutation only.

Architecture for the default sensor: [11, 16, 10, 4]
  inputs:  9 ray proximities + normalized speed + normalized heading
  outputs: forward, left, right, reverse in [-1, 1]
"""
import numpy as np

_default_rng = np.random.default_rng()


def get_rng(rng=None):
    """Fall back to an unseeded generator; seeded runs pass their own rng."""
    return _default_rng if rng is None else rng


class Level:
    """One fully connected layer: weights[i][j] connects input i to output j."""

    def __init__(self, input_count, output_count, rng=None):
        self.input_count = input_count
        self.output_count = output_count
        self.randomize(rng)

    def randomize(self, rng=None):
        rng = get_rng(rng)
        self.weights = rng.uniform(-1.0, 1.0, size=(self.input_count, self.output_count))
        self.biases = rng.uniform(-1.0, 1.0, size=self.output_count)

    def feedforward(self, inputs):
        inputs = np.asarray(inputs, dtype=float)
        if inputs.shape != (self.input_count,):
            raise ValueError(f"Level expects {self.input_count} inputs, got shape {inputs.shape}")
        return np.tanh(inputs @ self.weights + self.biases)

    def mutate(self, amount, rng=None):
        # Blend towards fresh noise: 0 keeps values, 1 replaces them
        rng = get_rng(rng)
        self.biases = self.biases * (1 - amount) + rng.uniform(-1.0, 1.0, size=self.biases.shape) * amount
        self.weights = self.weights * (1 - amount) + rng.uniform(-1.0, 1.0, size=self.weights.shape) * amount


class NeuralNetwork:
    def __init__(self, neuron_counts, rng=None):
        if len(neuron_counts) < 2:
            raise ValueError(f"Need at least input and output sizes, got {list(neuron_counts)}")
        self.levels = [
            Level(neuron_counts[i], neuron_counts[i + 1], rng)
            for i in range(len(neuron_counts) - 1)
        ]

    @property
    def neuron_counts(self):
        return [self.levels[0].input_count] + [level.output_count for level in self.levels]

    @property
    def input_count(self):
        return self.levels[0].input_count

    def feedforward(self, inputs):
        outputs = self.levels[0].feedforward(inputs)
        for level in self.levels[1:]:
            outputs = level.feedforward(outputs)
        return outputs

    def mutate(self, amount=1.0, rng=None):
        if not 0 <= amount <= 1:
            raise ValueError(f"Mutation amount must be within [0, 1], got {amount}")
        rng = get_rng(rng)
        for level in self.levels:
            level.mutate(amount, rng)

    def copy(self):
        clone = NeuralNetwork.__new__(NeuralNetwork)
        clone.levels = []
        for level in self.levels:
            copied = Level.__new__(Level)
            copied.input_count = level.input_count
            copied.output_count = level.output_count
            copied.weights = np.copy(level.weights)
            copied.biases = np.copy(level.biases)
            clone.levels.append(copied)
        return clone

    def to_dict(self):
        """Structural form: ordered levels of weight matrix + bias vector."""
        return {
            "levels": [
                {"weights": level.weights.tolist(), "biases": level.biases.tolist()}
                for level in self.levels
            ]
        }

    @classmethod
    def from_dict(cls, data):
        levels = data.get("levels") if isinstance(data, dict) else None
        if not levels:
            raise ValueError("Brain data has no levels")

        network = cls.__new__(cls)
        network.levels = []
        for index, entry in enumerate(levels):
            weights = np.asarray(entry["weights"], dtype=float)
            biases = np.asarray(entry["biases"], dtype=float)
            if weights.ndim != 2 or biases.shape != (weights.shape[1],):
                raise ValueError(
                    f"Level {index}: weights {weights.shape} do not match biases {biases.shape}")
            if network.levels and network.levels[-1].output_count != weights.shape[0]:
                raise ValueError(
                    f"Level {index} takes {weights.shape[0]} inputs but previous level "
                    f"produces {network.levels[-1].output_count}")
            level = Level.__new__(Level)
            level.input_count, level.output_count = weights.shape
            level.weights = weights
            level.biases = biases
            network.levels.append(level)
        return network
