"""
Datasets and deterministic splits.

A Dataset pairs an (n, d) input matrix with n labels. Splits never shuffle
unless given a seed, so the same dataset always splits the same way.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .exceptions import InsufficientData


@dataclass(frozen=True, eq=False)
class Dataset:
    """
    Ordered (input vector, label) pairs.

    Attributes:
        inputs: Feature matrix of shape (n_samples, n_features).
        labels: Labels of shape (n_samples,).
    """

    inputs: np.ndarray
    labels: np.ndarray

    def __post_init__(self) -> None:
        inputs = np.atleast_2d(np.asarray(self.inputs, dtype=float))
        labels = np.asarray(self.labels, dtype=float).reshape(-1)
        if inputs.shape[0] != labels.shape[0]:
            raise ValueError(
                f"{inputs.shape[0]} inputs but {labels.shape[0]} labels"
            )
        object.__setattr__(self, 'inputs', inputs)
        object.__setattr__(self, 'labels', labels)

    def __len__(self) -> int:
        return int(self.labels.shape[0])

    def __iter__(self) -> Iterator[Tuple[List[float], float]]:
        for x, y in zip(self.inputs, self.labels):
            yield [float(v) for v in x], float(y)

    @property
    def n_features(self) -> int:
        return int(self.inputs.shape[1])

    def subset(self, indices: Sequence[int]) -> Dataset:
        """Return the examples at `indices`, in that order."""
        idx = np.asarray(indices, dtype=int)
        return Dataset(self.inputs[idx], self.labels[idx])

    def split(
        self,
        validation_fraction: float,
        seed: Optional[int] = None,
    ) -> Tuple[Dataset, Dataset]:
        """
        Split into disjoint (train, validation) partitions.

        Args:
            validation_fraction: Share of examples held out, in (0, 1).
            seed: If given, examples are shuffled with this seed first.
                Otherwise the last examples form the validation set.

        Returns:
            (train, validation) datasets.

        Raises:
            ValueError: If the fraction is outside (0, 1).
            InsufficientData: If either partition would be empty.
        """
        if not 0 < validation_fraction < 1:
            raise ValueError(
                f"validation_fraction must be in (0, 1), got {validation_fraction}"
            )

        n = len(self)
        n_val = int(round(n * validation_fraction))
        if n_val < 1 or n_val >= n:
            raise InsufficientData(
                f"Cannot split {n} examples with validation_fraction="
                f"{validation_fraction} into non-empty partitions"
            )

        order = np.arange(n)
        if seed is not None:
            order = np.random.default_rng(seed).permutation(n)
        return self.subset(order[:n - n_val]), self.subset(order[n - n_val:])

    def k_folds(self, k: int) -> List[Tuple[Dataset, Dataset]]:
        """
        Contiguous k-fold partitions.

        Fold i is held out for validation and the remaining folds form the
        training set. Fold sizes differ by at most one.

        Returns:
            List of k (train, validation) pairs.

        Raises:
            InsufficientData: If k < 2 or there are fewer examples than folds.
        """
        n = len(self)
        if k < 2:
            raise InsufficientData(f"Need at least 2 folds, got {k}")
        if n < k:
            raise InsufficientData(
                f"Cannot build {k} non-empty folds from {n} examples"
            )

        folds = np.array_split(np.arange(n), k)
        splits = []
        for i, held_out in enumerate(folds):
            train_idx = np.concatenate([f for j, f in enumerate(folds) if j != i])
            splits.append((self.subset(train_idx), self.subset(held_out)))
        return splits


def make_moons(
    n_samples: int = 100,
    noise: float = 0.1,
    seed: Optional[int] = 0,
) -> Dataset:
    """
    Generate the classic 'moons' dataset for binary classification.

    Two interleaved half-circles that are not linearly separable.

    Args:
        n_samples: Total number of samples.
        noise: Standard deviation of Gaussian noise.
        seed: Random seed for reproducibility.

    Returns:
        Dataset with inputs of shape (n_samples, 2) and labels -1 or 1,
        first moon first.
    """
    if n_samples < 2:
        raise ValueError(f"n_samples must be at least 2, got {n_samples}")

    rng = np.random.default_rng(seed)

    n_first = n_samples // 2
    n_second = n_samples - n_first

    # First moon (top)
    theta1 = np.linspace(0, np.pi, n_first)
    first = np.column_stack([np.cos(theta1), np.sin(theta1)])

    # Second moon (bottom, shifted)
    theta2 = np.linspace(0, np.pi, n_second)
    second = np.column_stack([1 - np.cos(theta2), 0.5 - np.sin(theta2)])

    X = np.vstack([first, second])
    X += rng.normal(size=X.shape) * noise

    # Labels: 1 for first moon, -1 for second
    y = np.array([1.0] * n_first + [-1.0] * n_second)

    return Dataset(X, y)
