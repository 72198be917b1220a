"""One-vs-all logistic regression trained with batch gradient descent.

Every function works on torch tensors and stays on whatever device the
inputs live on. Weights have shape (features + 1, classes); row 0 holds the
intercepts and is never regularized.
"""
from pathlib import Path

import numpy as np
import torch

DEFAULT_ALPHA   = 0.1
DEFAULT_LAMBDA  = 1.0
DEFAULT_MAXITER = 1000
STOP_THRESHOLD  = 0.1


# ── Features ──────────────────────────────────────────────────────────────────

def to_features(images):
    """(n, H, W) images → (n, H*W + 1) features with a leading column of ones."""
    feats = images.flatten(start_dim=1)
    bias = torch.ones(feats.shape[0], 1, dtype=feats.dtype, device=feats.device)
    return torch.cat([bias, feats], dim=1)


# ── Model ─────────────────────────────────────────────────────────────────────

def sigmoid(val):
    return 1 / (1 + torch.exp(-val))


def predict(X, W):
    return sigmoid(X @ W)


def cost(W, X, Y, lambda_=DEFAULT_LAMBDA):
    """Regularized cross-entropy and its gradient.

    Returns (J, dJ). J holds one loss per output class, shape (classes,);
    dJ has the shape of W. The bias row is excluded from the penalty.
    """
    m = Y.shape[0]

    lambdat = torch.full_like(W, lambda_)
    lambdat[0, :] = 0

    H = predict(X, W)

    # log(H) is unguarded: a saturated H shows up as inf/nan in J
    J = -torch.sum(Y * torch.log(H) + (1 - Y) * torch.log(1 - H), dim=0) / m
    J = J + 0.5 * torch.sum(lambdat * W * W, dim=0) / m

    D = H - Y
    dJ = (X.T @ D + lambdat * W) / m
    return J, dJ


def train(X, Y, alpha=DEFAULT_ALPHA, lambda_=DEFAULT_LAMBDA,
          maxiter=DEFAULT_MAXITER, log_every=0):
    """Gradient descent from zero weights.

    Stops early once every class loss is below STOP_THRESHOLD, otherwise runs
    maxiter updates. Either way only the weights come back.
    """
    W = torch.zeros(X.shape[1], Y.shape[1], dtype=X.dtype, device=X.device)

    for i in range(maxiter):
        J, dJ = cost(W, X, Y, lambda_)
        if bool(torch.all(J < STOP_THRESHOLD)):
            if log_every:
                print(f"  iter {i:4d}  loss below {STOP_THRESHOLD} for every class, stopping")
            break

        if log_every and i % log_every == 0:
            print(f"  iter {i:4d}  loss: {J.sum().item():.4f}")

        W = W - alpha * dJ

    return W


# ── Evaluation ────────────────────────────────────────────────────────────────

def accuracy(predicted, target):
    # argmax returns the first maximal index on ties
    plabels = torch.argmax(predicted, dim=1)
    tlabels = torch.argmax(target, dim=1)
    return 100 * (plabels == tlabels).to(torch.float32).mean().item()


# ── Weight files ──────────────────────────────────────────────────────────────

def save_weights(path, weights, **meta):
    """Write W and scalar metadata to an .npz file; returns the path written."""
    path = Path(path)
    if path.suffix != ".npz":
        path = path.with_name(path.name + ".npz")
    np.savez(path, W=weights.detach().cpu().numpy(), **meta)
    return path


def load_weights(path, device="cpu"):
    with np.load(path) as data:
        if "W" not in data.files:
            raise ValueError(f"{path} has no 'W' array")
        W = torch.from_numpy(data["W"]).to(device)
        meta = {}
        for k in data.files:
            if k != "W":
                meta[k] = data[k].item() if data[k].ndim == 0 else data[k]
    return W, meta
