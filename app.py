import numpy as np
import torch
import gradio as gr
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from PIL import Image

from logreg import load_weights, predict, to_features
from mnist_common import load_split

GALLERY_SIZE = 100


def _to_pil(img):
    """28x28 float image → upscaled RGB PIL image for display."""
    arr = (img * 255).astype(np.uint8)
    return Image.fromarray(arr).resize((112, 112), Image.NEAREST).convert("RGB")


def predict_digit(img, W):
    """Score one 28x28 image against every digit; returns (scores, predicted digit)."""
    x = to_features(torch.from_numpy(img.astype(np.float32)).reshape(1, 28, 28).to(W.dtype))
    scores = predict(x, W).flatten().numpy()
    return scores, int(np.argmax(scores))


def score_plot(scores, pred, actual):
    correct = pred == actual
    colors  = ["crimson" if i == pred else "steelblue" for i in range(scores.size)]
    fig, ax = plt.subplots(figsize=(6, 3))
    ax.bar(range(scores.size), scores * 100, color=colors)
    ax.set_xlabel("Digit")
    ax.set_ylabel("One-vs-all score (%)")
    ax.set_title(f"Predicted: {pred}  |  Actual: {actual}  ({'✓' if correct else '✗'})")
    ax.set_xticks(range(scores.size))
    ax.set_ylim(0, 100)
    ax.grid(True, alpha=0.3, axis="y")
    plt.tight_layout()
    return fig


def build_demo(weights_path="weights.npz", dataset=None, seed=0):
    # ── Load MNIST test split and weights once ────────────────────────────────
    print("Loading MNIST dataset...")
    X_test, Y_test = load_split("test", dataset)
    print(f"MNIST loaded — test: {X_test.shape}")

    np.random.seed(seed)
    gallery_size = min(GALLERY_SIZE, X_test.shape[0])
    gallery_indices = np.random.choice(X_test.shape[0], gallery_size, replace=False)
    gallery_images = [_to_pil(X_test[i]) for i in gallery_indices]
    gallery_labels = [str(int(Y_test[i])) for i in gallery_indices]

    print("Loading trained weights...")
    W, meta = load_weights(weights_path)
    test_acc = float(meta.get("test_acc", float("nan")))
    print(f"Weights loaded — test accuracy: {test_acc:.1f}%")

    def on_predict(gallery_pos):
        if gallery_pos is None:
            return None, "Select an image from the gallery above."

        test_idx = gallery_indices[int(gallery_pos)]
        actual = int(Y_test[test_idx])
        scores, pred = predict_digit(X_test[test_idx], W)

        verdict = "correct" if pred == actual else "wrong"
        label = (f"Predicted: **{pred}** ({scores[pred]*100:.1f}%)  —  "
                 f"Actual: **{actual}**  — {verdict}")
        return score_plot(scores, pred, actual), label

    # ── Gradio UI ─────────────────────────────────────────────────────────────
    with gr.Blocks(title="Logistic Regression on MNIST") as demo:

        selected_pos = gr.State(None)   # index into gallery_indices

        gr.Markdown(
            "# One-vs-all Logistic Regression\n"
            "Ten sigmoid classifiers (784 pixels + bias → 1) trained on MNIST with "
            f"plain batch gradient descent. Test accuracy: **{test_acc:.1f}%**."
        )

        gallery = gr.Gallery(
            value=[(img, lbl) for img, lbl in zip(gallery_images, gallery_labels)],
            label=f"{gallery_size} random test images  (true label shown on hover)",
            columns=10,
            rows=10,
            height="auto",
            allow_preview=False,
            show_label=True,
        )
        predict_btn = gr.Button("Predict selected image", variant="primary")
        with gr.Row():
            pred_plot  = gr.Plot(label="Class scores")
            pred_label = gr.Markdown()

        def on_select(evt: gr.SelectData):
            return evt.index

        gallery.select(fn=on_select, outputs=selected_pos)

        predict_btn.click(
            fn=on_predict,
            inputs=[selected_pos],
            outputs=[pred_plot, pred_label],
        )

    return demo


if __name__ == "__main__":
    build_demo().launch()
