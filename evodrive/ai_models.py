"""

 █████  ██         ███    ███  ██████  ██████  ███████ ██      ███████    ██████  ██    ██ 
██   ██ ██         ████  ████ ██    ██ ██   ██ ██      ██      ██         ██   ██  ██  ██  
███████ ██         ██ ████ ██ ██    ██ ██   ██ █████   ██      ███████    ██████    ████   
██   ██ ██         ██  ██  ██ ██    ██ ██   ██ ██      ██           ██    ██         ██    
██   ██ ██ ███████ ██      ██  ██████  ██████  ███████ ███████ ███████ ██ ██         ██    
                                                                                           
                                                                                           

AI models for the driving simulation.
Contains the fixed-topology feedforward network that acts as a car's genome:
construction, forward pass with a full layer trace, mutation and persistence.
"""

import copy
import io
import logging
import os

import torch
import torch.nn as nn

from .constants import ACTIVATION, BRAIN_MUTATION_RATE, BRAIN_MUTATION_VARIATION
from .exceptions import (
    InputArityMismatch,
    InvalidTopology,
    PersistenceShapeMismatch,
    PersistenceUnavailable,
)

logger = logging.getLogger(__name__)


def sigmoid(x):
    return torch.sigmoid(x)


def clamped_linear(x):
    """Linear rectification clamped to [0, 1]; saturates at exactly 0 and 1."""
    return torch.clamp(x, 0.0, 1.0)


ACTIVATIONS = {
    "sigmoid": sigmoid,
    "clamped_linear": clamped_linear,
}


class Net(nn.Module):
    """Feedforward network whose weights are evolved, never trained.

    Every non-input layer is a float64 ``nn.Linear``. Seen as nodes, node ``j``
    of a layer is ``[bias[j], w[j, 0], ..., w[j, n-1]]`` where ``n`` is the size
    of the previous layer. The shape is fixed at construction; only weight
    values change afterwards.
    """

    def __init__(self, layer_sizes, activation=ACTIVATION, generator=None):
        super(Net, self).__init__()
        layer_sizes = list(layer_sizes)
        if len(layer_sizes) < 2:
            raise InvalidTopology(f"Need at least 2 layers, got {len(layer_sizes)}")
        for size in layer_sizes:
            if int(size) != size or size < 1:
                raise InvalidTopology(f"Empty layers not allowed: {layer_sizes}")
        if activation not in ACTIVATIONS:
            raise ValueError(f"Unknown activation '{activation}', expected one of {sorted(ACTIVATIONS)}")

        self.n_inputs = int(layer_sizes[0])
        self.activation = activation
        self.network = nn.ModuleList(
            nn.Linear(int(prev), int(size), dtype=torch.float64)
            for prev, size in zip(layer_sizes[:-1], layer_sizes[1:])
        )
        self.randomize_weights(generator)

    @property
    def layer_sizes(self):
        return [self.n_inputs] + [layer.out_features for layer in self.network]

    @property
    def layers(self):
        """Node view of the weights: one list per layer, bias first in each node."""
        view = []
        for layer in self.network:
            nodes = torch.cat([layer.bias.detach().unsqueeze(1), layer.weight.detach()], dim=1)
            view.append(nodes.tolist())
        return view

    def set_activation(self, activation):
        if activation not in ACTIVATIONS:
            raise ValueError(f"Unknown activation '{activation}', expected one of {sorted(ACTIVATIONS)}")
        self.activation = activation

    def randomize_weights(self, generator=None):
        with torch.no_grad():
            for param in self.parameters():
                param.uniform_(-1.0, 1.0, generator=generator)

    def forward(self, x):
        fn = ACTIVATIONS[self.activation]
        for layer in self.network:
            x = fn(layer(x))
        return x

    def predict(self, inputs):
        """Run a forward pass and return every layer's output.

        Element 0 is a copy of ``inputs``; element ``k`` is the output of
        layer ``k``. The last element drives the car, the rest are kept for
        visualization.
        """
        if len(inputs) != self.n_inputs:
            raise InputArityMismatch(self.n_inputs, len(inputs))

        fn = ACTIVATIONS[self.activation]
        x = torch.as_tensor(inputs, dtype=torch.float64)
        outputs = [x.tolist()]
        with torch.no_grad():
            for layer in self.network:
                x = fn(layer(x))
                outputs.append(x.tolist())
        return outputs

    def mutate(self, mutation_rate=BRAIN_MUTATION_RATE, mutation_strength=BRAIN_MUTATION_VARIATION, generator=None):
        """Perturb each weight (biases included) with probability ``mutation_rate``.

        A selected weight gets ``uniform(-mutation_strength, mutation_strength)``
        added to it. The rest are left untouched.
        """
        with torch.no_grad():
            for param in self.parameters():
                mutation_mask = torch.rand(param.shape, generator=generator, dtype=param.dtype) < mutation_rate
                mutation = torch.empty_like(param).uniform_(
                    -mutation_strength, mutation_strength, generator=generator
                )
                param.copy_(torch.where(mutation_mask, param + mutation, param))

    def clone(self):
        return copy.deepcopy(self)

    def serialize(self):
        buffer = io.BytesIO()
        torch.save(
            {
                "n_inputs": self.n_inputs,
                "layer_sizes": self.layer_sizes,
                "activation": self.activation,
                "state_dict": self.state_dict(),
            },
            buffer,
        )
        return buffer.getvalue()

    @classmethod
    def deserialize(cls, data):
        try:
            payload = torch.load(io.BytesIO(data), weights_only=True)
            net = cls(payload["layer_sizes"], activation=payload["activation"])
            if net.n_inputs != payload["n_inputs"]:
                raise ValueError("n_inputs does not match the first layer size")
            net.load_state_dict(payload["state_dict"])
        except Exception as e:
            raise PersistenceUnavailable(f"Could not decode genome: {e}") from e
        return net

    @classmethod
    def load_matching_shape(cls, path, expected_layer_sizes, activation=ACTIVATION, generator=None):
        """Load a saved genome if it has exactly ``expected_layer_sizes``.

        Returns ``(net, loaded)``. When the file is missing, unreadable,
        corrupt or of another shape, ``net`` is a fresh random network of
        the expected shape and ``loaded`` is False.
        """
        expected = list(expected_layer_sizes)
        try:
            if not os.path.exists(path):
                raise PersistenceUnavailable(f"No saved genome found at {path}")
            try:
                with open(path, "rb") as f:
                    data = f.read()
            except OSError as e:
                raise PersistenceUnavailable(f"Could not read {path}: {e}") from e
            net = cls.deserialize(data)
            if net.layer_sizes != expected:
                raise PersistenceShapeMismatch(expected, net.layer_sizes)
        except (PersistenceUnavailable, PersistenceShapeMismatch) as e:
            logger.warning("%s; using fresh network", e)
            return cls(expected, activation=activation, generator=generator), False

        net.set_activation(activation)
        logger.info("Genome loaded from %s - layers %s", path, expected)
        return net, True
