"""
Figures for a finished training run.

- plot_loss_curve: total loss per pass
- plot_decision_boundary: model output over the input plane, with data
"""

from __future__ import annotations
from pathlib import Path
from typing import Sequence, Union

import matplotlib.pyplot as plt
import numpy as np

from .data import Dataset
from .nn import Module
from .train import PassRecord, predict

PathLike = Union[str, Path]


def plot_loss_curve(history: Sequence[PassRecord], path: PathLike) -> Path:
    """
    Plot the training loss over passes.

    Args:
        history: Records returned by fit().
        path: Where to save the figure.

    Returns:
        The path written.
    """
    passes = [r.pass_index for r in history]
    plt.figure(figsize=(10, 6))
    plt.plot(passes, [r.total_loss for r in history], 'b-', linewidth=2, label='total loss')
    plt.plot(passes, [r.loss for r in history], 'g--', linewidth=1, label='loss')
    plt.xlabel('Pass')
    plt.ylabel('Loss')
    plt.title('Training Loss Curve')
    plt.legend()
    plt.grid(True, alpha=0.3)
    plt.tight_layout()
    plt.savefig(path, dpi=150)
    plt.close()
    return Path(path)


def plot_decision_boundary(
    model: Module,
    dataset: Dataset,
    path: PathLike,
    resolution: float = 0.05,
    title: str = "Decision Boundary",
) -> Path:
    """
    Visualize the decision boundary learned by a 2-input model.

    Args:
        model: Trained single-output model.
        dataset: Points to scatter on top (2 features).
        path: Where to save the figure.
        resolution: Grid step. Every grid point is a full forward pass,
            so keep this coarse.
        title: Plot title.

    Returns:
        The path written.
    """
    if dataset.n_features != 2:
        raise ValueError(
            f"Decision boundaries need 2 features, got {dataset.n_features}"
        )

    X, y = dataset.inputs, dataset.labels
    x_min, x_max = X[:, 0].min() - 0.5, X[:, 0].max() + 0.5
    y_min, y_max = X[:, 1].min() - 0.5, X[:, 1].max() + 0.5
    xx, yy = np.meshgrid(
        np.arange(x_min, x_max, resolution),
        np.arange(y_min, y_max, resolution)
    )

    Z = np.array([
        predict(model, (x1, x2)).data
        for x1, x2 in zip(xx.ravel(), yy.ravel())
    ]).reshape(xx.shape)

    plt.figure(figsize=(10, 8))
    plt.contourf(xx, yy, Z, levels=50, cmap='RdBu', alpha=0.8)
    plt.colorbar(label='Model output')
    if Z.min() < 0 < Z.max():
        plt.contour(xx, yy, Z, levels=[0], colors='black', linewidths=2)
    plt.scatter(X[:, 0], X[:, 1], c=y, cmap='RdBu', edgecolors='black', s=50)

    plt.xlabel('x1')
    plt.ylabel('x2')
    plt.title(title)
    plt.tight_layout()
    plt.savefig(path, dpi=150)
    plt.close()
    return Path(path)
