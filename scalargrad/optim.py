"""
Optimizers and Learning-Rate Schedules
======================================

A schedule is any pure callable mapping a pass index (0, 1, 2, ...) to a
learning rate. The ones defined here never increase with the pass index.
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Union

from .engine import Value, zero_grad
from .exceptions import NumericalInstability

Schedule = Callable[[int], float]


def _check_index(pass_index: int) -> None:
    if pass_index < 0:
        raise ValueError(f"Pass index must be non-negative, got {pass_index}")


@dataclass(frozen=True)
class ConstantRate:
    """The same learning rate on every pass."""

    rate: float

    def __post_init__(self) -> None:
        if self.rate < 0:
            raise ValueError(f"Learning rate must be non-negative, got {self.rate}")

    def __call__(self, pass_index: int) -> float:
        _check_index(pass_index)
        return self.rate


@dataclass(frozen=True)
class LinearDecay:
    """
    Linear decay from `initial` to `final` over `total_passes` passes.

        lr(t) = initial - (initial - final) * min(t, T) / T

    Passes beyond `total_passes` keep the final rate.
    """

    total_passes: int
    initial: float = 0.03
    final: float = 0.01

    def __post_init__(self) -> None:
        if self.total_passes < 1:
            raise ValueError(
                f"total_passes must be positive, got {self.total_passes}"
            )
        if not 0 <= self.final <= self.initial:
            raise ValueError(
                "LinearDecay needs 0 <= final <= initial, "
                f"got initial={self.initial}, final={self.final}"
            )

    def __call__(self, pass_index: int) -> float:
        _check_index(pass_index)
        progress = min(pass_index, self.total_passes) / self.total_passes
        return self.initial - (self.initial - self.final) * progress


@dataclass(frozen=True)
class ExponentialDecay:
    """Multiplicative decay: lr(t) = max(initial * decay^t, minimum)."""

    initial: float
    decay: float = 0.95
    minimum: float = 0.0

    def __post_init__(self) -> None:
        if self.initial < 0 or self.minimum < 0:
            raise ValueError("Learning rates must be non-negative")
        if not 0 < self.decay <= 1:
            raise ValueError(f"decay must be in (0, 1], got {self.decay}")

    def __call__(self, pass_index: int) -> float:
        _check_index(pass_index)
        return max(self.initial * self.decay ** pass_index, self.minimum)


class SGD:
    """
    Stochastic Gradient Descent optimizer.

    Updates parameters: p = p - lr * p.grad

    The learning rate is either a constant or a schedule evaluated at the
    optimizer's pass counter, which advances by one on every step().

    Attributes:
        params: List of parameters to optimize.
        schedule: Learning-rate schedule.
        t: Number of steps taken so far.
    """

    def __init__(
        self,
        params: Sequence[Value],
        lr: Union[float, Schedule] = 0.01,
    ) -> None:
        """
        Initialize SGD optimizer.

        Args:
            params: Parameters to optimize.
            lr: Learning rate, or a schedule mapping pass index to rate.
        """
        self.params: List[Value] = list(params)
        self.schedule: Schedule = lr if callable(lr) else ConstantRate(lr)
        self.t: int = 0

    def learning_rate(self, pass_index: Optional[int] = None) -> float:
        """Rate for `pass_index`, defaulting to the upcoming step."""
        return self.schedule(self.t if pass_index is None else pass_index)

    def step(self, learning_rate: Optional[float] = None) -> float:
        """
        Perform one optimization step.

        Updates all parameters based on their gradients. Call this after
        backward(). A learning rate of 0 leaves every parameter unchanged.

        Args:
            learning_rate: Rate to use instead of the schedule's.

        Returns:
            The learning rate that was applied.

        Raises:
            NumericalInstability: If any update would be non-finite. No
                parameter is modified in that case.
        """
        lr = self.learning_rate() if learning_rate is None else learning_rate

        updated = [p.data - lr * p.grad for p in self.params]
        for i, data in enumerate(updated):
            if not math.isfinite(data):
                raise NumericalInstability(
                    f"Update of parameter {i} with lr={lr} is not finite: {data}"
                )

        for p, data in zip(self.params, updated):
            p.data = data
        self.t += 1
        return lr

    def zero_grad(self) -> None:
        """Reset all gradients to zero."""
        zero_grad(self.params)
