"""
Loss Functions and Regularization
=================================

Every loss is built from the engine's operator set, so backward() on the
result reaches the model parameters.

Labels for classification are -1 or +1; the model's sign is the predicted
class.
"""

from __future__ import annotations
from typing import Callable, Dict, Sequence, Union

from .engine import Value
from .exceptions import DimensionMismatch

LossFn = Callable[[Value, float], Value]


def squared_error(prediction: Value, expected: Union[Value, float]) -> Value:
    """
    Squared error for a single example: (prediction - expected)^2.

    Example:
        >>> loss = squared_error(Value(0.6), 1.0)  # 0.16
    """
    return (prediction - expected) ** 2


def hinge(prediction: Value, expected: Union[Value, float]) -> Value:
    """
    Max-margin (SVM) loss for a single example: max(0, 1 - expected * prediction).

    Zero once the prediction has the right sign with a margin of at least 1.
    """
    return (1 - expected * prediction).relu()


LOSSES: Dict[str, LossFn] = {
    'mse': squared_error,
    'hinge': hinge,
}


def _mean_loss(
    loss_fn: LossFn,
    predictions: Sequence[Value],
    targets: Sequence[float],
) -> Value:
    if len(predictions) != len(targets):
        raise DimensionMismatch(
            f"Got {len(predictions)} predictions for {len(targets)} targets"
        )
    if not predictions:
        raise DimensionMismatch("Cannot average a loss over zero examples")

    n = len(predictions)
    return sum(
        (loss_fn(pred, target) for pred, target in zip(predictions, targets)),
        start=Value(0.0),
    ) / n


def mse_loss(predictions: Sequence[Value], targets: Sequence[float]) -> Value:
    """
    Mean Squared Error loss.

    MSE = (1/n) * sum((pred_i - target_i)^2)

    Args:
        predictions: Model outputs (Values).
        targets: Ground truth values (floats).

    Returns:
        Scalar Value representing the loss.

    Raises:
        DimensionMismatch: If the sequences differ in length or are empty.
    """
    return _mean_loss(squared_error, predictions, targets)


def hinge_loss(predictions: Sequence[Value], targets: Sequence[float]) -> Value:
    """
    Mean hinge loss: (1/n) * sum(max(0, 1 - y * pred)). Targets are -1 or +1.
    """
    return _mean_loss(hinge, predictions, targets)


def l2_regularization(
    l2_lambda: Union[Value, float],
    weights: Sequence[Value],
) -> Value:
    """
    L2 penalty: lambda * sum(w^2).

    Pass model.weights(), not model.parameters(): biases are not
    penalized. With lambda = 0 the penalty is exactly 0.0, so adding it to
    a loss leaves the loss value unchanged.

    Args:
        l2_lambda: Regularization strength.
        weights: Weight nodes to penalize.

    Returns:
        Scalar Value holding the penalty.
    """
    squares = sum((w ** 2 for w in weights), start=Value(0.0))
    return l2_lambda * squares
