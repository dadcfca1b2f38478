"""
Command-line driver.

Runs the full workflow on a synthetic moons dataset:
1. Split off a test set
2. Cross-validate the L2 lambda on the training set
3. Train a fresh model with the selected lambda
4. Report every pass and the test accuracy

Run: python -m scalargrad --passes 50 --plot-dir ./figures
"""

from __future__ import annotations
import argparse
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from .config import TrainingConfig
from .data import make_moons
from .exceptions import ScalarGradError
from .log import get_logger, set_level
from .nn import MLP
from .plotting import plot_decision_boundary, plot_loss_curve
from .train import PassRecord, accuracy, fit
from .xval import CrossValidationResult, CrossValidator

logger = get_logger("cli")


@dataclass
class RunSummary:
    l2_lambda: float
    cross_validation: CrossValidationResult
    history: List[PassRecord]
    test_accuracy: float
    model: MLP


def run(
    config: TrainingConfig,
    callback: Optional[Callable[[PassRecord], None]] = None,
) -> RunSummary:
    """
    Cross-validate lambda, then train and evaluate a final model.

    Args:
        config: Run configuration.
        callback: Receives each PassRecord of the final training run.
    """
    dataset = make_moons(config.n_samples, noise=config.noise, seed=config.seed)
    train_set, test_set = dataset.split(config.test_fraction, seed=config.seed)

    factory = config.model_factory()
    validator = CrossValidator(
        train_set,
        factory,
        config.candidates(),
        folds=config.folds,
        passes=config.cv_passes,
        schedule=config.schedule(config.cv_passes),
        loss_fn=config.loss_fn,
    )
    result = validator.search()

    model = factory()
    train_x, train_y = zip(*train_set)
    history = fit(
        model,
        train_x,
        train_y,
        passes=config.passes,
        schedule=config.schedule(config.passes),
        l2_lambda=result.best_lambda,
        loss_fn=config.loss_fn,
        callback=callback,
    )

    test_x, test_y = zip(*test_set)
    return RunSummary(
        l2_lambda=result.best_lambda,
        cross_validation=result,
        history=history,
        test_accuracy=accuracy(model, test_x, test_y),
        model=model,
    )


def _report(record: PassRecord) -> None:
    logger.info(
        "pass=%d, alpha=%.6f, prediction=%.6f, reg=%.6f, loss=%.6f, tot_loss=%.6f",
        record.pass_index,
        record.learning_rate,
        record.prediction,
        record.regularization,
        record.loss,
        record.total_loss,
    )


def build_parser() -> argparse.ArgumentParser:
    defaults = TrainingConfig()
    parser = argparse.ArgumentParser(
        prog="scalargrad",
        description="Train a small MLP with a cross-validated L2 penalty.",
    )
    parser.add_argument("--layers", type=int, nargs="+", default=list(defaults.layers),
                        help="layer sizes, the last one must be 1")
    parser.add_argument("--activation", choices=["relu", "tanh"], default=defaults.activation)
    parser.add_argument("--loss", choices=["mse", "hinge"], default=defaults.loss)
    parser.add_argument("--lambda-start", type=float, default=defaults.lambda_start)
    parser.add_argument("--lambda-end", type=float, default=defaults.lambda_end)
    parser.add_argument("--lambda-step", type=float, default=defaults.lambda_step)
    parser.add_argument("--folds", type=int, default=defaults.folds)
    parser.add_argument("--cv-passes", type=int, default=defaults.cv_passes)
    parser.add_argument("--passes", type=int, default=defaults.passes)
    parser.add_argument("--lr-initial", type=float, default=defaults.lr_initial)
    parser.add_argument("--lr-final", type=float, default=defaults.lr_final)
    parser.add_argument("--samples", type=int, default=defaults.n_samples)
    parser.add_argument("--noise", type=float, default=defaults.noise)
    parser.add_argument("--test-fraction", type=float, default=defaults.test_fraction)
    parser.add_argument("--seed", type=int, default=defaults.seed)
    parser.add_argument("--plot-dir", type=Path, default=None,
                        help="write loss_curve.png and decision_boundary.png here")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="log every training pass, cross-validation included")
    return parser


def config_from_args(args: argparse.Namespace) -> TrainingConfig:
    return TrainingConfig(
        layers=tuple(args.layers),
        activation=args.activation,
        loss=args.loss,
        lambda_start=args.lambda_start,
        lambda_end=args.lambda_end,
        lambda_step=args.lambda_step,
        folds=args.folds,
        cv_passes=args.cv_passes,
        passes=args.passes,
        lr_initial=args.lr_initial,
        lr_final=args.lr_final,
        n_samples=args.samples,
        noise=args.noise,
        test_fraction=args.test_fraction,
        seed=args.seed,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = config_from_args(args)
    except ValueError as exc:
        parser.error(str(exc))

    set_level(logging.DEBUG if args.verbose else logging.INFO)

    try:
        summary = run(config, callback=_report)
    except (ScalarGradError, ValueError) as exc:
        parser.error(str(exc))
    logger.info("L2 lambda value=%.4f", summary.l2_lambda)
    logger.info("Test accuracy=%.2f%%", summary.test_accuracy * 100)

    if args.plot_dir is not None:
        args.plot_dir.mkdir(parents=True, exist_ok=True)
        dataset = make_moons(config.n_samples, noise=config.noise, seed=config.seed)
        loss_path = plot_loss_curve(summary.history, args.plot_dir / "loss_curve.png")
        boundary_path = plot_decision_boundary(
            summary.model,
            dataset,
            args.plot_dir / "decision_boundary.png",
            title=f"Decision Boundary (test accuracy: {summary.test_accuracy:.1%})",
        )
        logger.info("Saved %s and %s", loss_path, boundary_path)

    return 0
