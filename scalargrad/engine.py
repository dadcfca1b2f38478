"""
Scalar Autograd Engine
======================

Reverse-mode automatic differentiation over scalar values.

Every arithmetic operation on a Value creates a new node that remembers its
operands and the operator tag that produced it. Calling backward() on a
result orders the graph so every consumer comes before its inputs and then
hands each operand its share of the upstream gradient via the chain rule.

The operator set is closed: add, sub, neg, mul, pow (constant exponent),
tanh and relu. All local derivatives are defined in one place,
_local_derivatives(), which dispatches on the Op tag.

Failures are raised immediately. An operation whose result is not a finite
real number raises NumericalInstability instead of letting NaN or Inf flow
into the rest of the graph.
"""

from __future__ import annotations
import math
from enum import Enum
from typing import Iterable, List, Optional, Set, Tuple, Union

import numpy as np

from .exceptions import NumericalInstability


# Type alias for numeric inputs
Numeric = Union[int, float, np.floating, np.integer]


class Op(Enum):
    """Operator tags. LEAF marks constants and parameters."""

    LEAF = ''
    ADD = '+'
    SUB = '-'
    NEG = 'neg'
    MUL = '*'
    POW = '**'
    TANH = 'tanh'
    RELU = 'relu'


def _checked(result: object, op: Op) -> float:
    """Return `result` as a float, or raise if it is not a finite real."""
    if isinstance(result, complex) or not math.isfinite(result):
        raise NumericalInstability(
            f"{op.name} produced a non-finite result: {result!r}"
        )
    return float(result)


def _power(base: float, exponent: float, op: Op) -> float:
    try:
        result = base ** exponent
    except (ZeroDivisionError, OverflowError) as exc:
        raise NumericalInstability(
            f"{op.name} failed for {base!r} ** {exponent!r}: {exc}"
        ) from exc
    return _checked(result, op)


class Value:
    """
    A scalar value that tracks its computational history for automatic differentiation.

    Every Value knows:
    1. Its data (the actual number)
    2. Its gradient (derivative of the output with respect to this value)
    3. Its operands (the Values that produced it, in order)
    4. Its operator tag (how to propagate gradients to its operands)

    Hashing and equality are by identity, so two nodes holding equal data
    are still distinct vertices of the graph.

    Attributes:
        data: The scalar value stored in this node.
        grad: The accumulated gradient of the final output with respect to this value.
        label: Optional name for debugging.

    Example:
        >>> a = Value(2.0, label='a')
        >>> b = Value(3.0, label='b')
        >>> c = a * b + a
        >>> c.backward()
        >>> print(a.grad)  # dc/da = b + 1 = 4.0
        4.0
        >>> print(b.grad)  # dc/db = a = 2.0
        2.0
    """

    __slots__ = ('data', 'grad', '_prev', '_op', '_exponent', 'label')

    # numpy scalars defer to the reflected operators below
    __array_ufunc__ = None

    def __init__(
        self,
        data: Numeric,
        _children: Tuple[Value, ...] = (),
        _op: Op = Op.LEAF,
        label: str = '',
        _exponent: Optional[float] = None,
    ) -> None:
        """
        Initialize a Value node.

        Args:
            data: The scalar value to store.
            _children: Operand nodes, in order (internal use).
            _op: The operator that produced this node (internal use).
            label: Optional name for debugging.
            _exponent: Constant exponent of a POW node (internal use).

        Raises:
            TypeError: If data is not a numeric type.
            NumericalInstability: If data is NaN or infinite.
        """
        if isinstance(data, bool) or not isinstance(
            data, (int, float, np.floating, np.integer)
        ):
            raise TypeError(
                f"Value data must be numeric, got {type(data).__name__}"
            )

        self.data: float = _checked(float(data), _op)
        self.grad: float = 0.0
        self._prev: Tuple[Value, ...] = tuple(_children)
        self._op: Op = _op
        self._exponent: Optional[float] = _exponent
        self.label: str = label

    def __repr__(self) -> str:
        """String representation showing data and gradient."""
        if self.label:
            return f"Value({self.label}={self.data:.4f}, grad={self.grad:.4f})"
        return f"Value(data={self.data:.4f}, grad={self.grad:.4f})"

    @property
    def op(self) -> Op:
        """The operator tag that produced this node."""
        return self._op

    @property
    def operands(self) -> Tuple[Value, ...]:
        """The ordered operand nodes (empty for leaves)."""
        return self._prev

    @property
    def exponent(self) -> Optional[float]:
        return self._exponent

    @property
    def is_leaf(self) -> bool:
        return not self._prev

    # =========================================================================
    # Arithmetic Operations
    # =========================================================================

    def __add__(self, other: Union[Value, Numeric]) -> Value:
        """Addition: out = self + other."""
        other = other if isinstance(other, Value) else Value(other)
        return Value(
            _checked(self.data + other.data, Op.ADD), (self, other), Op.ADD
        )

    def __radd__(self, other: Numeric) -> Value:
        """Handle numeric + Value."""
        return Value(other) + self

    def __sub__(self, other: Union[Value, Numeric]) -> Value:
        """Subtraction: out = self - other."""
        other = other if isinstance(other, Value) else Value(other)
        return Value(
            _checked(self.data - other.data, Op.SUB), (self, other), Op.SUB
        )

    def __rsub__(self, other: Numeric) -> Value:
        """Handle numeric - Value."""
        return Value(other) - self

    def __neg__(self) -> Value:
        """Negation: out = -self."""
        return Value(-self.data, (self,), Op.NEG)

    def __mul__(self, other: Union[Value, Numeric]) -> Value:
        """Multiplication: out = self * other."""
        other = other if isinstance(other, Value) else Value(other)
        return Value(
            _checked(self.data * other.data, Op.MUL), (self, other), Op.MUL
        )

    def __rmul__(self, other: Numeric) -> Value:
        """Handle numeric * Value."""
        return Value(other) * self

    def __truediv__(self, other: Union[Value, Numeric]) -> Value:
        """Division: self / other = self * other^(-1)."""
        other = other if isinstance(other, Value) else Value(other)
        return self * other ** -1

    def __rtruediv__(self, other: Numeric) -> Value:
        """Handle numeric / Value."""
        return Value(other) * self ** -1

    def __pow__(self, n: Union[int, float]) -> Value:
        """
        Power: out = self^n (where n is a constant, not a Value).

        Args:
            n: The exponent (must be numeric, not Value).

        Returns:
            New Value representing self raised to power n.

        Raises:
            TypeError: If n is a Value or otherwise not a number.
            NumericalInstability: If the result is not a finite real number,
                e.g. a negative base with a fractional exponent.
        """
        if isinstance(n, Value):
            raise TypeError("Power with Value exponent not supported.")
        if isinstance(n, bool) or not isinstance(
            n, (int, float, np.floating, np.integer)
        ):
            raise TypeError(
                f"Exponent must be numeric, got {type(n).__name__}"
            )

        n = float(n)
        return Value(
            _power(self.data, n, Op.POW), (self,), Op.POW, _exponent=n
        )

    # =========================================================================
    # Activation Functions
    # =========================================================================

    def tanh(self) -> Value:
        """Hyperbolic tangent: out = tanh(self), d/dx = 1 - tanh(x)^2."""
        return Value(math.tanh(self.data), (self,), Op.TANH)

    def relu(self) -> Value:
        """Rectified Linear Unit: out = max(0, self), d/dx = 1 if x >= 0 else 0."""
        return Value(max(0.0, self.data), (self,), Op.RELU)

    # =========================================================================
    # Backpropagation
    # =========================================================================

    def backward(self) -> None:
        """
        Compute gradients for all nodes in the computation graph.

        The algorithm:
        1. Build a topological ordering of the computation graph
        2. Set this node's gradient to 1.0 (d(self)/d(self) = 1)
        3. Walk the ordering in reverse, adding each operand's share of
           the node's gradient into that operand's gradient

        Reverse post-order visits every consumer of a node before the node
        itself, so a node's gradient is complete before it is propagated.

        Note: Calling backward() multiple times will ACCUMULATE gradients
        on every node that is not the root. Call zero_grad() on the
        parameters first if you want fresh gradients.

        Raises:
            NumericalInstability: If a local derivative or an accumulated
                gradient is not finite. Gradients written before the failure
                stay on their nodes, so call zero_grad() on the parameters
                before retrying or stepping.

        Example:
            >>> x = Value(2.0)
            >>> y = x ** 2 + 3 * x
            >>> y.backward()
            >>> print(x.grad)  # dy/dx = 2x + 3 = 7.0
            7.0
        """
        topo = topological_sort(self)

        self.grad = 1.0

        for node in reversed(topo):
            if not node._prev:
                continue
            for operand, local in zip(node._prev, _local_derivatives(node)):
                operand.grad = _checked(
                    operand.grad + local * node.grad, node._op
                )

    def zero_grad(self) -> None:
        """Reset gradient to zero."""
        self.grad = 0.0

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def item(self) -> float:
        """Return the scalar value (PyTorch compatibility)."""
        return self.data


def _local_derivatives(node: Value) -> Tuple[float, ...]:
    """
    Partial derivatives of `node` with respect to each of its operands.

    Returned in operand order, evaluated at the operands' current data.
    """
    op = node._op
    if op is Op.ADD:
        return (1.0, 1.0)
    if op is Op.SUB:
        return (1.0, -1.0)
    if op is Op.NEG:
        return (-1.0,)
    if op is Op.MUL:
        a, b = node._prev
        return (b.data, a.data)
    if op is Op.POW:
        (a,) = node._prev
        n = node._exponent
        if n == 0:
            # x^0 is constant, including at x = 0
            return (0.0,)
        # Power rule: d/dx(x^n) = n * x^(n-1)
        return (n * _power(a.data, n - 1, op),)
    if op is Op.TANH:
        return (1.0 - node.data ** 2,)
    if op is Op.RELU:
        (a,) = node._prev
        # the gradient passes through at exactly 0
        return (1.0 if a.data >= 0 else 0.0,)
    return ()


def topological_sort(root: Value) -> List[Value]:
    """
    Compute topological ordering of computation graph rooted at `root`.

    Depth-first post-order over operand edges, deduplicated by node
    identity. Every node appears after all of its operands, so the root is
    last. The walk uses an explicit stack, so deep graphs do not hit the
    recursion limit.

    Args:
        root: The root node of the computation graph.

    Returns:
        List of Values in topological order (root is last).

    Example:
        >>> a = Value(1.0)
        >>> b = Value(2.0)
        >>> c = a + b
        >>> d = c * a
        >>> topo = topological_sort(d)
        >>> # topo is [a, b, c, d]
    """
    topo: List[Value] = []
    visited: Set[Value] = set()
    stack: List[Tuple[Value, bool]] = [(root, False)]

    while stack:
        node, expanded = stack.pop()
        if expanded:
            topo.append(node)
            continue
        if node in visited:
            continue
        visited.add(node)
        stack.append((node, True))
        # reversed so operands are visited left to right
        for operand in reversed(node._prev):
            if operand not in visited:
                stack.append((operand, False))

    return topo


def zero_grad(values: Iterable[Value]) -> None:
    """
    Zero gradients for a collection of Values.

    Must be called on all parameters before a new backward pass, since
    gradients accumulate.
    """
    for v in values:
        v.grad = 0.0
