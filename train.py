"""Train on the full MNIST train split and save the weights to weights.npz."""
import argparse

import torch

from logreg import accuracy, predict, save_weights, to_features, train
from mnist_common import load_split, one_hot
from lr_demo import select_device


def _tensors(split, device, dataset=None):
    imgs, labels = load_split(split, dataset)
    X = to_features(torch.from_numpy(imgs).to(device))
    Y = torch.from_numpy(one_hot(labels)).to(device)
    return X, Y


def main(argv=None, train_data=None, test_data=None):
    parser = argparse.ArgumentParser(description="Train one-vs-all logistic regression on MNIST.")
    parser.add_argument("--alpha", type=float, default=1.0)
    parser.add_argument("--lambda", dest="lambda_", type=float, default=1.0)
    parser.add_argument("--maxiter", type=int, default=500)
    parser.add_argument("--device", type=int, default=0)
    parser.add_argument("--output", default="weights.npz")
    parser.add_argument("--log-every", type=int, default=50)
    args = parser.parse_args(argv)

    device = select_device(args.device)

    # ── Load MNIST ────────────────────────────────────────────────────────────
    print("Loading MNIST...")
    X_train, Y_train = _tensors("train", device, train_data)
    X_test,  Y_test  = _tensors("test", device, test_data)
    print(f"MNIST loaded — train: {tuple(X_train.shape)}, test: {tuple(X_test.shape)}")

    # ── Train ─────────────────────────────────────────────────────────────────
    print(f"Training ({args.maxiter} iterations, alpha={args.alpha}, lambda={args.lambda_})...")
    W = train(X_train, Y_train, args.alpha, args.lambda_, args.maxiter, log_every=args.log_every)

    train_acc = accuracy(predict(X_train, W), Y_train)
    test_acc  = accuracy(predict(X_test, W), Y_test)
    print(f"Train accuracy: {train_acc:.1f}%")
    print(f"Test accuracy: {test_acc:.1f}%")

    # ── Save ──────────────────────────────────────────────────────────────────
    path = save_weights(args.output, W, test_acc=test_acc)
    print(f"Weights saved to {path}")
    return W, test_acc


if __name__ == "__main__":
    main()
