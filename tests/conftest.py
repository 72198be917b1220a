import matplotlib
matplotlib.use("Agg")

import numpy as np
import pytest


def stripe_digits(n=200, seed=0):
    """MNIST-shaped stand-in: digit d is a bright bar at rows 4+2d on faint noise."""
    rng = np.random.default_rng(seed)
    labels = np.arange(n) % 10
    images = rng.integers(0, 30, size=(n, 28, 28), dtype=np.uint8)
    for img, d in zip(images, labels):
        img[4 + 2 * d:6 + 2 * d, 4:24] = 255
    return {"image": list(images), "label": labels.tolist()}


@pytest.fixture
def digits():
    return stripe_digits()


@pytest.fixture
def no_show(monkeypatch):
    import matplotlib.pyplot as plt
    monkeypatch.setattr(plt, "show", lambda *a, **k: None)
