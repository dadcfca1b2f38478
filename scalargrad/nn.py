"""
Neural Network Module
=====================

PyTorch-like neural network building blocks using the scalar autograd engine.

This module provides:
- Module: Base class for all neural network components
- Neuron: A single neuron with weights, bias, and activation
- Layer: A collection of neurons (fully connected layer)
- MLP: Multi-layer perceptron (stack of layers)

The API mirrors PyTorch's nn.Module:
- model.parameters() returns all trainable parameters
- model.weights() returns the weights only (what L2 regularization penalizes)
- model.zero_grad() resets all gradients
- Forward pass is just calling the model: output = model(input)

Initialization takes an explicit seed or numpy Generator, so two models
built from the same seed start from identical parameters.
"""

from __future__ import annotations
from typing import List, Optional, Sequence, Union

import numpy as np

from .engine import Value, zero_grad
from .exceptions import DimensionMismatch

ACTIVATIONS = ('relu', 'tanh')

# Seed or generator accepted by np.random.default_rng
RandomState = Optional[Union[int, np.random.Generator]]


class Module:
    """
    Base class for all neural network modules.

    Subclasses implement forward() and parameters(). Provides:
    - parameters(): collect all trainable Value objects
    - weights(): the subset of parameters that are weights (no biases)
    - zero_grad(): reset gradients before backward pass
    """

    def forward(self, x: Sequence[Union[Value, float]]):
        raise NotImplementedError

    def __call__(self, x: Sequence[Union[Value, float]]):
        return self.forward(x)

    def parameters(self) -> List[Value]:
        """
        Return all trainable parameters in this module.

        Override this in subclasses to return the module's parameters.
        The order is deterministic.

        Returns:
            List of Value objects representing trainable parameters.
        """
        return []

    def weights(self) -> List[Value]:
        """Return the weight parameters, excluding biases."""
        return []

    def zero_grad(self) -> None:
        """
        Reset gradients of all parameters to zero.

        Call this before each backward pass to prevent gradient accumulation.
        """
        zero_grad(self.parameters())

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class Neuron(Module):
    """
    A single artificial neuron.

    Computes: output = activation(sum(w_i * x_i) + b)

    Attributes:
        w: List of weight Values
        b: Bias Value
        nonlin: Whether to apply nonlinearity
        activation: Which activation function to use

    Example:
        >>> n = Neuron(3, activation='tanh', rng=0)  # 3 inputs
        >>> out = n([1.0, 2.0, 3.0])  # Forward pass
    """

    def __init__(
        self,
        nin: int,
        nonlin: bool = True,
        activation: str = 'relu',
        rng: RandomState = None,
    ) -> None:
        """
        Initialize a neuron.

        Args:
            nin: Number of inputs to this neuron.
            nonlin: Whether to apply nonlinear activation.
            activation: Activation function ('relu' or 'tanh').
            rng: Seed or numpy Generator used to draw the weights.

        Raises:
            ValueError: If nin is not positive or the activation is unknown.
        """
        if nin < 1:
            raise ValueError(f"A neuron needs at least one input, got {nin}")
        if activation not in ACTIVATIONS:
            raise ValueError(
                f"Unknown activation {activation!r}, expected one of {ACTIVATIONS}"
            )

        rng = np.random.default_rng(rng)
        # Xavier/Glorot-style scaling keeps early activations in range
        scale = (2.0 / nin) ** 0.5
        self.w: List[Value] = [
            Value(float(u) * scale, label=f'w{i}')
            for i, u in enumerate(rng.uniform(-1.0, 1.0, size=nin))
        ]
        self.b: Value = Value(0.0, label='b')
        self.nonlin: bool = nonlin
        self.activation: str = activation

    def forward(self, x: Sequence[Union[Value, float]]) -> Value:
        """
        Forward pass: compute neuron output.

        Args:
            x: Inputs (Values or floats), one per weight.

        Returns:
            Single Value representing neuron output.

        Raises:
            DimensionMismatch: If input length doesn't match weight count.
        """
        if len(x) != len(self.w):
            raise DimensionMismatch(
                f"Expected {len(self.w)} inputs, got {len(x)}"
            )

        # Weighted sum: sum(w_i * x_i) + b
        act = sum(
            (wi * xi for wi, xi in zip(self.w, x)),
            start=self.b
        )

        if not self.nonlin:
            return act
        if self.activation == 'tanh':
            return act.tanh()
        return act.relu()

    def parameters(self) -> List[Value]:
        """Return weights and bias."""
        return self.w + [self.b]

    def weights(self) -> List[Value]:
        return list(self.w)

    def __repr__(self) -> str:
        act = self.activation if self.nonlin else 'linear'
        return f"Neuron({len(self.w)}, {act})"


class Layer(Module):
    """
    A fully connected layer of neurons.

    Every neuron receives the same input, so a layer with `nout` neurons
    transforms an input of size `nin` to an output of size `nout`.

    Example:
        >>> layer = Layer(3, 4)  # 3 inputs, 4 outputs
        >>> out = layer([1.0, 2.0, 3.0])  # Returns list of 4 Values
    """

    def __init__(
        self,
        nin: int,
        nout: int,
        nonlin: bool = True,
        activation: str = 'relu',
        rng: RandomState = None,
    ) -> None:
        """
        Initialize a layer.

        Args:
            nin: Number of inputs per neuron.
            nout: Number of neurons (outputs).
            nonlin: Whether neurons use nonlinearity.
            activation: Activation function for all neurons.
            rng: Seed or numpy Generator shared by all neurons.
        """
        if nout < 1:
            raise ValueError(f"A layer needs at least one neuron, got {nout}")
        rng = np.random.default_rng(rng)
        self.neurons: List[Neuron] = [
            Neuron(nin, nonlin=nonlin, activation=activation, rng=rng)
            for _ in range(nout)
        ]

    def forward(self, x: Sequence[Union[Value, float]]) -> List[Value]:
        """Compute all neuron outputs, in neuron order."""
        return [n(x) for n in self.neurons]

    def parameters(self) -> List[Value]:
        """Return all parameters from all neurons."""
        return [p for n in self.neurons for p in n.parameters()]

    def weights(self) -> List[Value]:
        return [w for n in self.neurons for w in n.weights()]

    def __repr__(self) -> str:
        return f"Layer({len(self.neurons[0].w)} -> {len(self.neurons)})"


class MLP(Module):
    """
    Multi-Layer Perceptron: a stack of fully connected layers.

    Architecture:
        Input -> Hidden1 -> ... -> HiddenN -> Output

    All hidden layers use the specified activation. The output layer
    is linear, which suits both regression and sign-based classification.

    Example:
        >>> # Create MLP: 2 inputs -> 5 hidden -> 5 hidden -> 1 output
        >>> model = MLP(2, [5, 5, 1], activation='relu', rng=42)
        >>> out = model([0.5, -1.0])  # Single output Value
    """

    def __init__(
        self,
        nin: int,
        nouts: Sequence[int],
        activation: str = 'relu',
        rng: RandomState = None,
    ) -> None:
        """
        Initialize an MLP.

        Args:
            nin: Number of input features.
            nouts: List of layer sizes. Last element is output size.
            activation: Activation function for hidden layers.
            rng: Seed or numpy Generator. Layers draw from it in order, so
                a fixed seed always yields the same parameters.
        """
        if not nouts:
            raise ValueError("An MLP needs at least one layer")

        rng = np.random.default_rng(rng)
        sizes = [nin] + list(nouts)
        self.layers: List[Layer] = [
            Layer(
                sizes[i],
                sizes[i + 1],
                nonlin=(i != len(nouts) - 1),
                activation=activation,
                rng=rng,
            )
            for i in range(len(nouts))
        ]

    def forward(
        self, x: Sequence[Union[Value, float]]
    ) -> Union[Value, List[Value]]:
        """
        Forward pass through all layers.

        Returns:
            Output Value(s). Returns single Value if output size is 1,
            otherwise returns list of Values.
        """
        for layer in self.layers:
            x = layer(x)

        return x[0] if len(x) == 1 else x

    def parameters(self) -> List[Value]:
        """Return all parameters from all layers."""
        return [p for layer in self.layers for p in layer.parameters()]

    def weights(self) -> List[Value]:
        return [w for layer in self.layers for w in layer.weights()]

    def __repr__(self) -> str:
        layer_strs = [str(layer) for layer in self.layers]
        return f"MLP([{', '.join(layer_strs)}])"
