"""Tests for the config, the driver and the figures it writes."""

import pytest

from scalargrad import LinearDecay, TrainingConfig
from scalargrad.cli import build_parser, config_from_args, main, run
from scalargrad.losses import hinge, squared_error
from scalargrad.plotting import plot_decision_boundary, plot_loss_curve


SMALL = dict(
    layers=(3, 1),
    lambda_start=0.0,
    lambda_end=0.01,
    lambda_step=0.01,
    folds=2,
    cv_passes=2,
    passes=3,
    n_samples=20,
)


class TestTrainingConfig:
    def test_defaults_follow_reference_run(self) -> None:
        config = TrainingConfig()
        assert config.layers == (5, 5, 1)
        assert len(config.candidates()) == 21
        assert config.schedule(50)(0) == pytest.approx(0.03)
        assert config.loss_fn is squared_error

    def test_model_factory_is_reproducible(self) -> None:
        factory = TrainingConfig(seed=9).model_factory()
        a, b = factory(), factory()
        assert a is not b
        assert [p.data for p in a.parameters()] == [p.data for p in b.parameters()]

    def test_layers_coerced_to_tuple(self) -> None:
        assert TrainingConfig(layers=[4, 1]).layers == (4, 1)

    @pytest.mark.parametrize("overrides", [
        dict(layers=(3, 2)),
        dict(layers=()),
        dict(activation='sigmoid'),
        dict(loss='l1'),
        dict(passes=0),
        dict(lambda_step=0.0),
        dict(lr_initial=0.01, lr_final=0.02),
        dict(test_fraction=0.0),
        dict(test_fraction=1.5),
    ])
    def test_invalid(self, overrides) -> None:
        with pytest.raises(ValueError):
            TrainingConfig(**overrides)

    def test_schedule_type(self) -> None:
        assert isinstance(TrainingConfig().schedule(10), LinearDecay)


class TestDriver:
    def test_run_reports_every_pass(self) -> None:
        seen = []
        summary = run(TrainingConfig(**SMALL), callback=seen.append)
        assert len(summary.history) == 3
        assert seen == summary.history
        assert summary.l2_lambda in (0.0, 0.01)
        assert summary.l2_lambda == summary.cross_validation.best_lambda
        assert 0.0 <= summary.test_accuracy <= 1.0

    def test_run_is_reproducible(self) -> None:
        config = TrainingConfig(**SMALL)
        a, b = run(config), run(config)
        assert [r.total_loss for r in a.history] == [r.total_loss for r in b.history]

    def test_parser_maps_onto_config(self) -> None:
        args = build_parser().parse_args(
            ["--layers", "4", "1", "--activation", "tanh", "--loss", "hinge", "--passes", "7"]
        )
        config = config_from_args(args)
        assert config.layers == (4, 1)
        assert config.activation == 'tanh'
        assert config.loss_fn is hinge
        assert config.passes == 7

    def test_main_rejects_bad_config(self) -> None:
        with pytest.raises(SystemExit):
            main(["--layers", "3", "2"])

    def test_main_rejects_bad_test_fraction(self) -> None:
        with pytest.raises(SystemExit):
            main(["--test-fraction", "1.5"])

    def test_main_reports_insufficient_data(self) -> None:
        """Four training examples cannot fill ten folds."""
        with pytest.raises(SystemExit):
            main([
                "--samples", "5", "--folds", "10",
                "--layers", "3", "1", "--lambda-step", "0.01",
            ])

    def test_main_writes_plots(self, tmp_path) -> None:
        argv = [
            "--layers", "3", "1", "--lambda-step", "0.01", "--folds", "2",
            "--cv-passes", "1", "--passes", "2", "--samples", "20",
            "--plot-dir", str(tmp_path),
        ]
        assert main(argv) == 0
        assert (tmp_path / "loss_curve.png").exists()
        assert (tmp_path / "decision_boundary.png").exists()


class TestPlotting:
    def test_plot_loss_curve(self, tmp_path) -> None:
        summary = run(TrainingConfig(**SMALL))
        path = plot_loss_curve(summary.history, tmp_path / "loss.png")
        assert path.exists()

    def test_decision_boundary_requires_two_features(self, tmp_path) -> None:
        from scalargrad import MLP, Dataset

        dataset = Dataset([[0.0], [1.0]], [1.0, -1.0])
        with pytest.raises(ValueError):
            plot_decision_boundary(MLP(1, [1], rng=0), dataset, tmp_path / "b.png")
