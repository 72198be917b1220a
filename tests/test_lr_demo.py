import pytest
import torch

import lr_demo as demo
from logreg import to_features
from mnist_common import setup_mnist


@pytest.fixture
def cpu_only(monkeypatch):
    monkeypatch.setattr(torch.cuda, "is_available", lambda: False)


@pytest.fixture
def fake_mnist(monkeypatch, digits):
    def _setup(frac, device, dataset=None):
        return setup_mnist(frac, device, digits)
    monkeypatch.setattr(demo, "setup_mnist", _setup)


def test_parse_args_defaults():
    assert demo.parse_args([]) == demo.DemoConfig(device_index=0, console=False, perc=60)


def test_parse_args_dash_selects_console():
    config = demo.parse_args(["1", "-", "80"])
    assert config == demo.DemoConfig(device_index=1, console=True, perc=80)
    assert demo.parse_args(["0", "-console"]).console
    assert not demo.parse_args(["0", "show"]).console


@pytest.mark.parametrize("argv", [["0", "-", "101"], ["x"], ["-h"]])
def test_parse_args_rejects(argv):
    with pytest.raises(SystemExit):
        demo.parse_args(argv)


def test_select_device_cpu(cpu_only):
    assert demo.select_device(0) == torch.device("cpu")
    with pytest.raises(RuntimeError, match="Invalid device index"):
        demo.select_device(2)


def test_device_info_cpu(capsys):
    demo.device_info(torch.device("cpu"))
    out = capsys.readouterr().out
    assert torch.__version__ in out
    assert "CPU" in out


def test_benchmark_reports_times(digits, capsys):
    _, _, _, train_images, test_images, train_targets, _ = setup_mnist(0.6, "cpu", digits)
    capsys.readouterr()
    train_time, predict_time = demo.benchmark_lr(
        to_features(train_images), train_targets, to_features(test_images), torch.device("cpu")
    )
    out = capsys.readouterr().out
    assert train_time > 0 and predict_time > 0
    assert "Training time:" in out
    assert "Prediction time:" in out


def test_lr_demo_console(digits, capsys):
    assert demo.lr_demo(True, 60, torch.device("cpu"), digits) == 0
    out = capsys.readouterr().out
    assert "Accuracy on training data:" in out
    assert "Accuracy on testing data:" in out
    assert "Predicted:" not in out


def test_lr_demo_learns_stripes(digits, capsys):
    demo.lr_demo(True, 60, torch.device("cpu"), digits)
    out = capsys.readouterr().out
    line = next(l for l in out.splitlines() if l.startswith("Accuracy on testing data:"))
    assert float(line.split(":")[1]) >= 90


def test_lr_demo_displays_results(digits, no_show, capsys):
    demo.lr_demo(False, 60, torch.device("cpu"), digits)
    assert capsys.readouterr().out.count("Predicted:") == demo.NUM_DISPLAY


def test_main_success(cpu_only, fake_mnist, capsys):
    assert demo.main(["0", "-"]) == 0
    assert "PyTorch v" in capsys.readouterr().out


def test_main_prints_device_error_without_exit_code(cpu_only, capsys):
    assert demo.main(["3", "-"]) is None
    assert "Invalid device index 3" in capsys.readouterr().out


def test_lr_demo_with_empty_training_set(digits, capsys):
    assert demo.lr_demo(True, 0, torch.device("cpu"), digits) == 0
    out = capsys.readouterr().out
    assert "Accuracy on training data: nan" in out
    assert "Accuracy on testing data:" in out
