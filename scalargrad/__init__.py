"""scalargrad: a scalar-value autograd engine with cross-validated training."""

from .engine import Op, Value, topological_sort, zero_grad
from .exceptions import (
    DimensionMismatch,
    InsufficientData,
    NumericalInstability,
    ScalarGradError,
)
from .nn import Module, Neuron, Layer, MLP
from .losses import squared_error, hinge, mse_loss, hinge_loss, l2_regularization
from .optim import SGD, ConstantRate, LinearDecay, ExponentialDecay
from .data import Dataset, make_moons
from .train import PassRecord, fit, predict, accuracy
from .xval import CrossValidator, CrossValidationResult, CandidateScore, float_range
from .config import TrainingConfig

__all__ = [
    "Op",
    "Value",
    "topological_sort",
    "zero_grad",
    "ScalarGradError",
    "DimensionMismatch",
    "InsufficientData",
    "NumericalInstability",
    "Module",
    "Neuron",
    "Layer",
    "MLP",
    "squared_error",
    "hinge",
    "mse_loss",
    "hinge_loss",
    "l2_regularization",
    "SGD",
    "ConstantRate",
    "LinearDecay",
    "ExponentialDecay",
    "Dataset",
    "make_moons",
    "PassRecord",
    "fit",
    "predict",
    "accuracy",
    "CrossValidator",
    "CrossValidationResult",
    "CandidateScore",
    "float_range",
    "TrainingConfig",
]
