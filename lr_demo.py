"""Demo of one-vs-all logistic regression on MNIST.

    python lr_demo.py [device_index] [display_flag] [data_fraction_percent]

A display flag starting with '-' runs headless. The data fraction defaults
to 60 percent of the 10k-image pool.
"""
import argparse
import sys
import time
from dataclasses import dataclass

import torch

from logreg import accuracy, predict, to_features, train
from mnist_common import display_results, setup_mnist

DEMO_ALPHA   = 1.0
DEMO_LAMBDA  = 1.0
DEMO_MAXITER = 500
BENCH_ITERS  = 100
NUM_DISPLAY  = 20


@dataclass(frozen=True)
class DemoConfig:
    device_index: int = 0
    console: bool = False
    perc: int = 60


# ── Device ────────────────────────────────────────────────────────────────────

def select_device(index):
    if torch.cuda.is_available():
        count = torch.cuda.device_count()
        if not 0 <= index < count:
            raise RuntimeError(f"Invalid device index {index}: {count} CUDA device(s) available")
        return torch.device("cuda", index)
    if index != 0:
        raise RuntimeError(f"Invalid device index {index}: CUDA unavailable, only the CPU (0) can be used")
    return torch.device("cpu")


def device_info(device):
    print(f"PyTorch v{torch.__version__}")
    if device.type == "cuda":
        props = torch.cuda.get_device_properties(device)
        print(f"[{device.index}] {props.name}, {props.total_memory // 2**20} MB")
    else:
        print(f"[0] CPU, {torch.get_num_threads()} threads")


def synchronize(device):
    # kernels are queued asynchronously on CUDA; drain before reading the clock
    if device.type == "cuda":
        torch.cuda.synchronize(device)


# ── Benchmark ─────────────────────────────────────────────────────────────────

def benchmark_lr(train_feats, train_targets, test_feats, device):
    start = time.perf_counter()
    Weights = train(train_feats, train_targets, DEMO_ALPHA, DEMO_LAMBDA, DEMO_MAXITER)
    synchronize(device)
    train_time = time.perf_counter() - start
    print(f"Training time: {train_time:4.4f} s")

    start = time.perf_counter()
    for _ in range(BENCH_ITERS):
        predict(test_feats, Weights)
    synchronize(device)
    predict_time = (time.perf_counter() - start) / BENCH_ITERS
    print(f"Prediction time: {predict_time:4.4f} s")

    return train_time, predict_time


# ── Demo ──────────────────────────────────────────────────────────────────────

def lr_demo(console, perc, device, dataset=None):
    frac = perc / 100.0
    (num_classes, num_train, num_test,
     train_images, test_images,
     train_targets, test_targets) = setup_mnist(frac, device, dataset)

    train_feats = to_features(train_images)
    test_feats  = to_features(test_images)

    Weights = train(train_feats, train_targets, DEMO_ALPHA, DEMO_LAMBDA, DEMO_MAXITER)

    train_outputs = predict(train_feats, Weights)
    test_outputs  = predict(test_feats, Weights)

    print(f"Accuracy on training data: {accuracy(train_outputs, train_targets):2.2f}")
    print(f"Accuracy on testing data: {accuracy(test_outputs, test_targets):2.2f}")

    benchmark_lr(train_feats, train_targets, test_feats, device)

    if not console:
        display_results(test_images, test_outputs, NUM_DISPLAY)

    return 0


# ── CLI ───────────────────────────────────────────────────────────────────────

def _percent(value):
    perc = int(value)
    if not 0 <= perc <= 100:
        raise argparse.ArgumentTypeError(f"{value} is not a percentage between 0 and 100")
    return perc


def parse_args(argv=None):
    argv = sys.argv[1:] if argv is None else list(argv)
    parser = argparse.ArgumentParser(
        description="Train one-vs-all logistic regression on MNIST and benchmark it."
    )
    parser.add_argument("device", nargs="?", type=int, default=0,
                        help="compute device index (default: 0)")
    parser.add_argument("display", nargs="?", default="",
                        help="any value starting with '-' skips the result plots")
    parser.add_argument("perc", nargs="?", type=_percent, default=60,
                        help="percentage of the data to use (default: 60)")

    # positionals only: a display flag like '-' must not be read as an option
    if argv[:1] not in (["-h"], ["--help"]):
        argv = ["--", *argv]
    args = parser.parse_args(argv)

    return DemoConfig(device_index=args.device, console=args.display.startswith("-"), perc=args.perc)


def main(argv=None):
    config = parse_args(argv)
    try:
        device = select_device(config.device_index)
        device_info(device)
        return lr_demo(config.console, config.perc, device)
    except RuntimeError as e:
        # no exit code on this path
        print(e)


if __name__ == "__main__":
    sys.exit(main())
