import torch

from evodrive.ai_models import Net
from evodrive.evolution import load_best_genome, save_best_genome


def test_load_matching_shape(tmp_path):
    path = tmp_path / "genome.pt"
    net = Net([8, 15, 3], generator=torch.Generator().manual_seed(4))
    path.write_bytes(net.serialize())

    loaded, ok = Net.load_matching_shape(str(path), [8, 15, 3])
    assert ok
    assert loaded.predict([0.5] * 8) == net.predict([0.5] * 8)


def test_missing_file_gives_fresh_network(tmp_path):
    net, ok = Net.load_matching_shape(str(tmp_path / "nope.pt"), [8, 15, 3])
    assert not ok
    assert net.layer_sizes == [8, 15, 3]


def test_corrupt_file_gives_fresh_network(tmp_path):
    path = tmp_path / "genome.pt"
    path.write_bytes(b"definitely not a genome")
    net, ok = Net.load_matching_shape(str(path), [4, 3, 2])
    assert not ok
    assert net.layer_sizes == [4, 3, 2]


def test_shape_mismatch_gives_fresh_network(tmp_path):
    path = tmp_path / "genome.pt"
    saved = Net([4, 3, 2], generator=torch.Generator().manual_seed(1))
    path.write_bytes(saved.serialize())

    net, ok = Net.load_matching_shape(str(path), [4, 5, 2])
    assert not ok
    assert net.layer_sizes == [4, 5, 2]

    net, ok = Net.load_matching_shape(str(path), [4, 3, 3, 2])
    assert not ok
    assert net.layer_sizes == [4, 3, 3, 2]


def test_loaded_genome_takes_requested_activation(tmp_path):
    path = tmp_path / "genome.pt"
    path.write_bytes(Net([2, 2], activation="sigmoid").serialize())
    net, ok = Net.load_matching_shape(str(path), [2, 2], activation="clamped_linear")
    assert ok
    assert net.activation == "clamped_linear"


def test_save_best_genome_creates_directory(tmp_path):
    path = tmp_path / "trained_models" / "best.pt"
    net = Net([8, 15, 3], generator=torch.Generator().manual_seed(8))
    assert save_best_genome(net, str(path))

    loaded, ok = load_best_genome([8, 15, 3], str(path))
    assert ok
    assert loaded.layers == net.layers


def test_save_best_genome_reports_failure(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    assert not save_best_genome(Net([2, 2]), str(blocker / "best.pt"))
