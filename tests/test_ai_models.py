import math

import pytest
import torch

from evodrive.ai_models import Net
from evodrive.exceptions import InputArityMismatch, InvalidTopology


def seeded(seed=0):
    return torch.Generator().manual_seed(seed)


def test_trace_shape_matches_layer_sizes():
    net = Net([4, 3, 2], generator=seeded())
    trace = net.predict([0.5, 0.5, 0.5, 0.5])
    assert [len(layer) for layer in trace] == [4, 3, 2]
    assert trace[0] == [0.5, 0.5, 0.5, 0.5]


@pytest.mark.parametrize("sizes", [[1, 1], [8, 15, 3], [5, 7, 6, 1], [3, 2, 2, 2, 4]])
def test_trace_length_includes_input(sizes):
    net = Net(sizes, generator=seeded(1))
    trace = net.predict([0.25] * sizes[0])
    assert len(trace) == len(sizes)
    assert len(trace[-1]) == sizes[-1]


@pytest.mark.parametrize("sizes", [[], [3], [3, 0, 2], [4, -1], [0, 3]])
def test_invalid_topology(sizes):
    with pytest.raises(InvalidTopology):
        Net(sizes)


def test_input_arity_mismatch():
    net = Net([4, 3, 2], generator=seeded())
    with pytest.raises(InputArityMismatch):
        net.predict([0.1, 0.2, 0.3])


def test_unknown_activation():
    with pytest.raises(ValueError):
        Net([2, 2], activation="tanh")


def test_initial_weights_within_unit_range():
    net = Net([8, 15, 3], generator=seeded(3))
    for layer in net.layers:
        for node in layer:
            assert all(-1.0 <= w <= 1.0 for w in node)


def test_node_view_puts_bias_first():
    net = Net([4, 3, 2], generator=seeded())
    layers = net.layers
    assert [len(layer) for layer in layers] == [3, 2]
    assert all(len(node) == 5 for node in layers[0])
    assert all(len(node) == 4 for node in layers[1])
    assert layers[0][1][0] == net.network[0].bias[1].item()
    assert layers[0][1][1:] == net.network[0].weight[1].tolist()


def test_predict_is_pure():
    net = Net([8, 15, 3], generator=seeded(7))
    inputs = [0.1, 0.9, 0.3, 1.0, 1.0, 0.4, 0.0, 0.7]
    assert net.predict(inputs) == net.predict(inputs)


def test_sigmoid_matches_hand_computation():
    net = Net([2, 1], generator=seeded())
    with torch.no_grad():
        net.network[0].bias.fill_(0.5)
        net.network[0].weight.copy_(torch.tensor([[1.0, -2.0]], dtype=torch.float64))
    out = net.predict([1.0, 0.5])[-1][0]
    assert out == pytest.approx(1.0 / (1.0 + math.exp(-0.5)))


def test_clamped_linear_saturates_exactly():
    net = Net([2, 2], activation="clamped_linear", generator=seeded())
    with torch.no_grad():
        net.network[0].weight.zero_()
        net.network[0].bias.copy_(torch.tensor([5.0, -5.0], dtype=torch.float64))
    assert net.predict([0.3, 0.3])[-1] == [1.0, 0.0]


def test_mutate_changes_weights():
    net = Net([8, 15, 3], generator=seeded(11))
    before = net.layers
    net.mutate(mutation_rate=0.5, mutation_strength=0.5, generator=seeded(12))
    assert net.layers != before


def test_mutate_with_zero_rate_changes_nothing():
    net = Net([8, 15, 3], generator=seeded(11))
    before = net.layers
    for seed in range(20):
        net.mutate(mutation_rate=0.0, generator=seeded(seed))
    assert net.layers == before


def test_mutation_stays_within_strength():
    net = Net([4, 3, 2], generator=seeded(5))
    before = net.layers
    net.mutate(mutation_rate=1.0, mutation_strength=0.1, generator=seeded(6))
    for layer_before, layer_after in zip(before, net.layers):
        for node_before, node_after in zip(layer_before, layer_after):
            for w0, w1 in zip(node_before, node_after):
                assert abs(w1 - w0) <= 0.1 + 1e-12


def test_mutation_is_replayable_with_seed():
    a = Net([4, 3, 2], generator=seeded(5))
    b = Net([4, 3, 2], generator=seeded(5))
    a.mutate(generator=seeded(9))
    b.mutate(generator=seeded(9))
    assert a.layers == b.layers


def test_clone_is_independent():
    parent = Net([4, 3, 2], generator=seeded())
    before = parent.layers
    child = parent.clone()
    child.mutate(mutation_rate=1.0, generator=seeded(1))
    assert parent.layers == before
    assert child.layers != before


def test_serialize_round_trip():
    net = Net([8, 15, 3], activation="clamped_linear", generator=seeded(2))
    restored = Net.deserialize(net.serialize())
    assert restored.layer_sizes == [8, 15, 3]
    assert restored.activation == "clamped_linear"
    for inputs in ([0.0] * 8, [1.0] * 8, [0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8]):
        assert restored.predict(inputs) == net.predict(inputs)
