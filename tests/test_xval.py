"""Tests for cross-validated lambda selection."""

import numpy as np
import pytest

from scalargrad import (
    MLP,
    CandidateScore,
    CrossValidator,
    Dataset,
    InsufficientData,
    float_range,
    make_moons,
)


def separable(n: int = 12) -> Dataset:
    """Labels are the sign of the first feature, classes alternating."""
    x = np.array([(i // 2 + 1) / n * (1 if i % 2 == 0 else -1) for i in range(n)])
    return Dataset(np.column_stack([x, np.zeros(n)]), np.sign(x))


class FixedScores(CrossValidator):
    """Skips training and scores candidates from a lookup table."""

    def __init__(self, table, candidates):
        super().__init__(separable(), lambda: MLP(2, [1], rng=0), candidates, folds=2)
        self.table = table
        self.calls = []

    def score(self, l2_lambda):
        self.calls.append(l2_lambda)
        value = self.table[l2_lambda]
        return CandidateScore(l2_lambda, (value,), value)


class TestFloatRange:
    def test_inclusive_end(self) -> None:
        assert float_range(0.0, 0.01, 0.0025) == pytest.approx([0.0, 0.0025, 0.005, 0.0075, 0.01])

    def test_reference_range(self) -> None:
        values = float_range(0.0, 0.01, 0.0005)
        assert len(values) == 21
        assert values[0] == 0.0
        assert values[-1] == pytest.approx(0.01)

    def test_single_value(self) -> None:
        assert float_range(0.5, 0.5, 0.1) == [0.5]

    def test_invalid(self) -> None:
        with pytest.raises(ValueError):
            float_range(0.0, 1.0, 0.0)
        with pytest.raises(ValueError):
            float_range(1.0, 0.0, 0.1)


class TestSelection:
    def test_unique_best_is_selected_regardless_of_order(self) -> None:
        table = {0.0: 0.5, 0.1: 0.5, 0.2: 1.0, 0.3: 0.75}
        forward = FixedScores(table, [0.0, 0.1, 0.2, 0.3]).search()
        shuffled = FixedScores(table, [0.3, 0.0, 0.2, 0.1]).search()
        assert forward.best_lambda == shuffled.best_lambda == 0.2
        assert forward.best_score == 1.0

    def test_candidates_scored_in_ascending_order(self) -> None:
        validator = FixedScores({0.0: 0.1, 0.1: 0.2, 0.2: 0.3}, [0.2, 0.0, 0.1])
        result = validator.search()
        assert validator.calls == [0.0, 0.1, 0.2]
        assert [s.l2_lambda for s in result.scores] == [0.0, 0.1, 0.2]

    def test_ties_resolve_to_lowest_lambda(self) -> None:
        table = {0.0: 0.5, 0.1: 0.9, 0.2: 0.9}
        assert FixedScores(table, [0.2, 0.1, 0.0]).search().best_lambda == 0.1

    def test_no_candidates(self) -> None:
        with pytest.raises(ValueError):
            CrossValidator(separable(), lambda: MLP(2, [1], rng=0), [])


class TestCrossValidation:
    def test_fresh_model_per_fold_and_candidate(self) -> None:
        built = []

        def factory():
            model = MLP(2, [1], rng=0)
            built.append(model)
            return model

        validator = CrossValidator(
            separable(), factory, [0.0, 0.5], folds=3, passes=2, schedule=0.1,
        )
        result = validator.search()
        assert len(built) == 6
        assert len({id(m) for m in built}) == 6
        assert all(len(s.fold_scores) == 3 for s in result.scores)

    def test_separable_data_picks_lowest_of_equal_scores(self) -> None:
        validator = CrossValidator.from_range(
            separable(12),
            lambda: MLP(2, [1], rng=0),
            start=0.0, end=0.002, step=0.001,
            folds=3, passes=30, schedule=0.1,
        )
        result = validator.search()
        assert [s.l2_lambda for s in result.scores] == pytest.approx([0.0, 0.001, 0.002])
        best = max(s.score for s in result.scores)
        first_best = next(s for s in result.scores if s.score == best)
        assert result.best_lambda == first_best.l2_lambda
        assert result.best_score == best

    def test_trained_unique_best_regardless_of_order(self) -> None:
        """
        The second feature is always 0, so its weight only feels the L2 term
        and shrinks by (1 - 2 * lr * lambda) per pass. Scoring by how small
        that weight ends up makes the largest lambda the single winner.
        """
        def unused_weight(model, inputs, targets):
            return -abs(model.layers[0].neurons[0].w[1].data)

        def search(candidates):
            return CrossValidator(
                separable(12),
                lambda: MLP(2, [1], rng=0),
                candidates,
                folds=3, passes=5, schedule=0.1, metric=unused_weight,
            ).search()

        forward = search([0.0, 0.5, 1.0, 2.0])
        shuffled = search([1.0, 2.0, 0.0, 0.5])
        assert forward.best_lambda == shuffled.best_lambda == 2.0
        scores = [s.score for s in forward.scores]
        assert scores == sorted(scores)
        assert scores.count(forward.best_score) == 1
        assert [s.score for s in shuffled.scores] == scores

    def test_search_is_deterministic(self) -> None:
        def search():
            return CrossValidator(
                make_moons(30, seed=2),
                lambda: MLP(2, [3, 1], rng=5),
                [0.0, 0.01, 0.1],
                folds=3, passes=3,
            ).search()

        a, b = search(), search()
        assert a.best_lambda == b.best_lambda
        assert [s.fold_scores for s in a.scores] == [s.fold_scores for s in b.scores]

    def test_insufficient_data(self) -> None:
        factory = lambda: MLP(2, [1], rng=0)  # noqa: E731
        with pytest.raises(InsufficientData):
            CrossValidator(separable(3), factory, [0.0], folds=5)
        with pytest.raises(InsufficientData):
            CrossValidator(separable(3), factory, [0.0], folds=1)
