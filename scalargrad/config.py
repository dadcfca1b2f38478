"""Run configuration shared by the CLI and programmatic callers."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, List, Tuple

from .losses import LOSSES, LossFn
from .nn import ACTIVATIONS, MLP
from .optim import LinearDecay
from .xval import float_range


@dataclass(frozen=True)
class TrainingConfig:
    """
    Every knob of a cross-validated training run.

    The defaults reproduce the reference setup: a 2 -> 5 -> 5 -> 1 ReLU
    network on 100 moons samples, lambda searched over [0, 0.01] in steps
    of 0.0005 with 10 folds, then 50 passes with the learning rate decaying
    linearly from 0.03 to 0.01.
    """

    nin: int = 2
    layers: Tuple[int, ...] = (5, 5, 1)
    activation: str = 'relu'
    loss: str = 'mse'
    lambda_start: float = 0.0
    lambda_end: float = 0.01
    lambda_step: float = 0.0005
    folds: int = 10
    cv_passes: int = 10
    passes: int = 50
    lr_initial: float = 0.03
    lr_final: float = 0.01
    n_samples: int = 100
    noise: float = 0.1
    test_fraction: float = 0.2
    seed: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, 'layers', tuple(self.layers))
        if not self.layers or any(n < 1 for n in self.layers):
            raise ValueError(f"layers must be positive sizes, got {self.layers}")
        if self.layers[-1] != 1:
            raise ValueError("The output layer must have exactly one neuron")
        if self.activation not in ACTIVATIONS:
            raise ValueError(
                f"activation must be one of {ACTIVATIONS}, got {self.activation!r}"
            )
        if self.loss not in LOSSES:
            raise ValueError(
                f"loss must be one of {sorted(LOSSES)}, got {self.loss!r}"
            )
        if self.passes < 1 or self.cv_passes < 1:
            raise ValueError("passes and cv_passes must be positive")
        if not 0 < self.test_fraction < 1:
            raise ValueError(
                f"test_fraction must be in (0, 1), got {self.test_fraction}"
            )
        # validates the range eagerly
        self.candidates()
        self.schedule(self.passes)

    @property
    def loss_fn(self) -> LossFn:
        return LOSSES[self.loss]

    def candidates(self) -> List[float]:
        return float_range(self.lambda_start, self.lambda_end, self.lambda_step)

    def schedule(self, passes: int) -> LinearDecay:
        return LinearDecay(passes, initial=self.lr_initial, final=self.lr_final)

    def model_factory(self) -> Callable[[], MLP]:
        """Factory producing identically initialized models (seeded)."""
        def build() -> MLP:
            return MLP(self.nin, self.layers, activation=self.activation, rng=self.seed)
        return build
