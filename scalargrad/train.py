"""
Training Loop
=============

One pass is a full forward pass over the training examples, a backward
pass from the total loss, and one optimizer step:

    predictions -> mean loss (+ L2 penalty) -> backward -> step -> zero_grad

Each pass produces a PassRecord with the values a caller wants to report.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple, Union

from .engine import Value
from .log import get_logger
from .losses import LossFn, l2_regularization, squared_error
from .nn import Module
from .optim import SGD, Schedule

logger = get_logger("train")


@dataclass(frozen=True)
class PassRecord:
    """Observable values of one training pass."""

    pass_index: int
    learning_rate: float
    predictions: Tuple[float, ...]
    loss: float
    regularization: float
    total_loss: float

    @property
    def prediction(self) -> float:
        """The first (or only) prediction of the pass."""
        return self.predictions[0]


def predict(model: Module, x: Sequence[float]) -> Value:
    """Forward a single input vector and return the scalar output node."""
    out = model([float(v) for v in x])
    if not isinstance(out, Value):
        raise TypeError(
            f"Expected a single-output model, got {len(out)} outputs"
        )
    return out


def accuracy(
    model: Module,
    inputs: Sequence[Sequence[float]],
    targets: Sequence[float],
) -> float:
    """
    Share of examples whose prediction has the same sign as the label.

    Args:
        model: Single-output model.
        inputs: Input vectors.
        targets: Labels (-1 or 1).

    Returns:
        Accuracy as a float between 0 and 1.
    """
    if len(inputs) == 0:
        raise ValueError("Cannot compute accuracy over zero examples")

    correct = 0
    for x, y in zip(inputs, targets):
        if (predict(model, x).data > 0) == (y > 0):
            correct += 1
    return correct / len(inputs)


def fit(
    model: Module,
    inputs: Sequence[Sequence[float]],
    targets: Sequence[float],
    passes: int,
    schedule: Union[float, Schedule],
    l2_lambda: float = 0.0,
    loss_fn: LossFn = squared_error,
    callback: Optional[Callable[[PassRecord], None]] = None,
) -> List[PassRecord]:
    """
    Train the model using gradient descent.

    Args:
        model: Single-output model to train in place.
        inputs: Training input vectors.
        targets: Training labels.
        passes: Number of passes over the training data.
        schedule: Learning rate, or schedule mapping pass index to rate.
        l2_lambda: L2 strength applied to model.weights().
        loss_fn: Per-example loss.
        callback: Called with every PassRecord as soon as the pass ends.

    Returns:
        One PassRecord per pass.
    """
    if passes < 0:
        raise ValueError(f"passes must be non-negative, got {passes}")
    if len(inputs) != len(targets):
        raise ValueError(
            f"Got {len(inputs)} inputs for {len(targets)} targets"
        )
    if len(inputs) == 0:
        raise ValueError("Cannot train on zero examples")

    optimizer = SGD(model.parameters(), lr=schedule)
    optimizer.zero_grad()
    history: List[PassRecord] = []

    for pass_index in range(passes):
        # Forward pass
        predictions = [predict(model, x) for x in inputs]
        losses = [loss_fn(p, float(y)) for p, y in zip(predictions, targets)]
        data_loss = sum(losses, start=Value(0.0)) / len(losses)

        reg_loss = l2_regularization(l2_lambda, model.weights())
        total_loss = data_loss + reg_loss

        # Backward pass and update
        total_loss.backward()
        lr = optimizer.step()
        optimizer.zero_grad()

        record = PassRecord(
            pass_index=pass_index,
            learning_rate=lr,
            predictions=tuple(p.data for p in predictions),
            loss=data_loss.data,
            regularization=reg_loss.data,
            total_loss=total_loss.data,
        )
        history.append(record)
        logger.debug(
            "pass=%d lr=%.6f loss=%.6f reg=%.6f total=%.6f",
            pass_index, lr, record.loss, record.regularization, record.total_loss,
        )
        if callback is not None:
            callback(record)

    return history
