import torch
import torch.nn as nn

from trackpilot.nn_evolution import NeuralNetwork


class DrivingNN(nn.Module):
    """
    Torch twin of a NeuralNetwork: same layers, tanh after every one.
    Outputs forward, left, right, reverse activations in [-1,1].
    """
    def __init__(self, neuron_counts):
        super(DrivingNN, self).__init__()
        self.layers = nn.ModuleList(
            nn.Linear(neuron_counts[i], neuron_counts[i + 1])
            for i in range(len(neuron_counts) - 1)
        )
        self.double()

    def forward(self, x):
        for layer in self.layers:
            x = torch.tanh(layer(x))
        return x

    @classmethod
    def from_network(cls, network):
        model = cls(network.neuron_counts)
        with torch.no_grad():
            for layer, level in zip(model.layers, network.levels):
                # nn.Linear stores (outputs, inputs)
                layer.weight.copy_(torch.as_tensor(level.weights.T, dtype=torch.float64))
                layer.bias.copy_(torch.as_tensor(level.biases, dtype=torch.float64))
        return model

    def to_network(self):
        return NeuralNetwork.from_dict({
            "levels": [
                {"weights": layer.weight.detach().cpu().numpy().T.tolist(),
                 "biases": layer.bias.detach().cpu().numpy().tolist()}
                for layer in self.layers
            ]
        })


def export_brain(network, path):
    """Save a brain as a torch state dict (.pth)."""
    model = DrivingNN.from_network(network)
    torch.save({"neuron_counts": network.neuron_counts, "state_dict": model.state_dict()}, path)
    print(f"Exported torch brain {network.neuron_counts} to {path}")


def import_brain(path):
    checkpoint = torch.load(path)
    model = DrivingNN(checkpoint["neuron_counts"])
    model.load_state_dict(checkpoint["state_dict"])
    print(f"Imported torch brain {checkpoint['neuron_counts']} from {path}")
    return model.to_network()
