"""
Cross-Validation
================

Selects the L2 regularization strength by k-fold cross-validation.

Every candidate lambda is scored the same way: for each fold a fresh
model comes out of the factory, is trained on the other folds, and is
scored on the held-out fold. The candidate with the highest mean score
wins; ties go to the lowest lambda.
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple, Union

from .data import Dataset
from .log import get_logger
from .losses import LossFn, squared_error
from .nn import Module
from .optim import ConstantRate, Schedule
from .train import accuracy, fit

logger = get_logger("xval")

ModelFactory = Callable[[], Module]
Metric = Callable[[Module, List[List[float]], List[float]], float]


def float_range(start: float, end: float, step: float) -> List[float]:
    """
    Ascending floats start, start + step, ... up to and including `end`.

    Values are computed as start + i * step, so no error accumulates.

    Example:
        >>> float_range(0.0, 0.01, 0.0025)
        [0.0, 0.0025, 0.005, 0.0075, 0.01]
    """
    if step <= 0:
        raise ValueError(f"step must be positive, got {step}")
    if end < start:
        raise ValueError(f"end ({end}) is smaller than start ({start})")

    count = int(math.floor((end - start) / step + 1e-9)) + 1
    return [start + i * step for i in range(count)]


@dataclass(frozen=True)
class CandidateScore:
    """Held-out scores of one lambda, per fold and averaged."""

    l2_lambda: float
    fold_scores: Tuple[float, ...]
    score: float


@dataclass(frozen=True)
class CrossValidationResult:
    best_lambda: float
    best_score: float
    scores: Tuple[CandidateScore, ...]


class CrossValidator:
    """
    k-fold cross-validation over candidate L2 lambdas.

    The model factory must return a freshly initialized model on every call,
    built with the same initialization policy (e.g. a fixed seed), so
    candidates are compared from the same starting point.

    Example:
        >>> dataset = make_moons(60, seed=1)
        >>> cv = CrossValidator.from_range(
        ...     dataset, lambda: MLP(2, [4, 1], rng=0),
        ...     start=0.0, end=0.01, step=0.005, folds=3, passes=5,
        ... )
        >>> result = cv.search()
        >>> result.best_lambda
    """

    def __init__(
        self,
        dataset: Dataset,
        model_factory: ModelFactory,
        candidates: Iterable[float],
        folds: int = 10,
        passes: int = 10,
        schedule: Optional[Union[float, Schedule]] = None,
        loss_fn: LossFn = squared_error,
        metric: Metric = accuracy,
    ) -> None:
        """
        Args:
            dataset: Examples to cross-validate on.
            model_factory: Returns a fresh, identically initialized model.
            candidates: Lambdas to try. Searched in ascending order.
            folds: Number of folds.
            passes: Training passes per fold.
            schedule: Learning rate or schedule for each training run.
                Defaults to a constant 0.03.
            loss_fn: Per-example training loss.
            metric: Held-out score, higher is better.

        Raises:
            ValueError: If there are no candidates.
            InsufficientData: If the dataset cannot form `folds` non-empty
                train/validation splits.
        """
        self.candidates: List[float] = sorted(set(float(c) for c in candidates))
        if not self.candidates:
            raise ValueError("No candidate lambdas given")

        self.splits = dataset.k_folds(folds)
        self.model_factory = model_factory
        self.passes = passes
        self.schedule = ConstantRate(0.03) if schedule is None else schedule
        self.loss_fn = loss_fn
        self.metric = metric

    @classmethod
    def from_range(
        cls,
        dataset: Dataset,
        model_factory: ModelFactory,
        start: float,
        end: float,
        step: float,
        **kwargs,
    ) -> CrossValidator:
        """Build a validator whose candidates are float_range(start, end, step)."""
        return cls(dataset, model_factory, float_range(start, end, step), **kwargs)

    def score(self, l2_lambda: float) -> CandidateScore:
        """Train and evaluate one candidate on every fold."""
        fold_scores = []
        for train, validation in self.splits:
            model = self.model_factory()
            train_x, train_y = zip(*train)
            fit(
                model,
                train_x,
                train_y,
                passes=self.passes,
                schedule=self.schedule,
                l2_lambda=l2_lambda,
                loss_fn=self.loss_fn,
            )
            val_x, val_y = zip(*validation)
            fold_scores.append(self.metric(model, list(val_x), list(val_y)))

        return CandidateScore(
            l2_lambda=l2_lambda,
            fold_scores=tuple(fold_scores),
            score=sum(fold_scores) / len(fold_scores),
        )

    def search(self) -> CrossValidationResult:
        """
        Score every candidate and select the best.

        Returns:
            The result, with the winning lambda and every candidate's score.
        """
        logger.info(
            "Searching L2 lambda over %d candidates in [%g, %g] with %d folds",
            len(self.candidates), self.candidates[0], self.candidates[-1],
            len(self.splits),
        )

        scores: List[CandidateScore] = []
        best: Optional[CandidateScore] = None
        for l2_lambda in self.candidates:
            candidate = self.score(l2_lambda)
            scores.append(candidate)
            logger.info(
                "lambda=%.4f score=%.2f%%", l2_lambda, candidate.score * 100
            )
            # strict comparison keeps the first (lowest) lambda on ties
            if best is None or candidate.score > best.score:
                best = candidate

        logger.info("Selected lambda=%.4f (score=%.2f%%)", best.l2_lambda, best.score * 100)
        return CrossValidationResult(
            best_lambda=best.l2_lambda,
            best_score=best.score,
            scores=tuple(scores),
        )
