"""MNIST loading and result display shared by the demo, train.py and app.py."""
import numpy as np
import torch
import matplotlib.pyplot as plt

NUM_CLASSES    = 10
MAX_TRAIN_FRAC = 0.8


# ── Loading ───────────────────────────────────────────────────────────────────

def load_split(split, dataset=None):
    """Images as float32 (n, 28, 28) in [0, 1] and labels as int64 (n,).

    `dataset` may be any mapping with "image" and "label" columns; by default
    the split is fetched from the Hugging Face hub.
    """
    if dataset is None:
        from datasets import load_dataset
        dataset = load_dataset("mnist", split=split)
    imgs = np.array([np.array(img) for img in dataset["image"]], dtype=np.float32)
    labels = np.array(dataset["label"], dtype=np.int64)
    return imgs / 255.0, labels


def one_hot(labels, num_classes=NUM_CLASSES):
    oh = np.zeros((labels.size, num_classes), dtype=np.float32)
    oh[np.arange(labels.size), labels.astype(int)] = 1
    return oh


def setup_mnist(frac=0.6, device="cpu", dataset=None, seed=0):
    """Split the 10k MNIST test images into train/test sets.

    Each image lands in the training set with probability min(frac, 0.8).
    Returns (num_classes, num_train, num_test, train_images, test_images,
    train_targets, test_targets) with one-hot targets, all on `device`.
    """
    print("Loading MNIST...")
    try:
        images, labels = load_split("test", dataset)
    except (OSError, ValueError, KeyError) as e:
        raise RuntimeError(f"Failed to load MNIST: {e}") from e

    rng = np.random.default_rng(seed)
    cond = rng.random(labels.size) < min(frac, MAX_TRAIN_FRAC)

    def _to(arr):
        return torch.from_numpy(np.ascontiguousarray(arr)).to(device)

    train_images, test_images = _to(images[cond]), _to(images[~cond])
    train_targets = _to(one_hot(labels[cond]))
    test_targets  = _to(one_hot(labels[~cond]))

    num_train, num_test = int(cond.sum()), int((~cond).sum())
    print(f"MNIST loaded — train: {num_train}, test: {num_test}")
    return (NUM_CLASSES, num_train, num_test,
            train_images, test_images, train_targets, test_targets)


# ── Display ───────────────────────────────────────────────────────────────────

def display_results(images, outputs, num_display=20, seed=None):
    """Show a random sample of test images titled with their predicted digit."""
    images = images.detach().cpu().numpy()
    predicted = torch.argmax(outputs, dim=1).cpu().numpy()

    rng = np.random.default_rng(seed)
    num_display = min(num_display, images.shape[0])
    picks = rng.choice(images.shape[0], num_display, replace=False)

    cols = max(1, min(num_display, 5))
    rows = max(1, -(-num_display // cols))
    fig, axes = plt.subplots(rows, cols, figsize=(2 * cols, 2.2 * rows), squeeze=False)
    for ax in axes.flat:
        ax.axis("off")

    for ax, idx in zip(axes.flat, picks):
        pred = int(predicted[idx])
        print(f"Predicted: {pred}")
        ax.imshow(images[idx].reshape(28, 28), cmap="gray")
        ax.set_title(f"Predicted: {pred}", fontsize=9)

    plt.tight_layout()
    plt.show()
    return fig
