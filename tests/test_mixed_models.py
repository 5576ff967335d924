from types import SimpleNamespace

import numpy as np
import pandas as pd
import pytest
from statsmodels.regression.mixed_linear_model import MixedLM

from floor_sentiment.errors import (
    ConvergenceError, InvalidParameter, SchemaMismatch, UnmatchedCategory,
)
from floor_sentiment.mixed_models import fit_by_category, fit_mixed_model, prediction_grid
from floor_sentiment.panel import build_panel, calendar, two_party


@pytest.fixture(scope="module")
def panel(floor_corpus):
    lexicon = pd.DataFrame({"word": ["good", "bad"], "category": ["positive", "negative"]})
    return two_party(build_panel(floor_corpus, lexicon))


@pytest.fixture(scope="module")
def cal(floor_corpus):
    return calendar(floor_corpus["date"].min(), floor_corpus["date"].max())


@pytest.fixture(scope="module")
def negative_fit(panel):
    return fit_mixed_model(panel, category="negative")


@pytest.fixture(scope="module")
def joint_fit(panel):
    return fit_mixed_model(panel, joint=True)


class TestPredictionGrid:

    def test_shape(self, cal):
        grid = prediction_grid(cal)
        assert len(cal) == 77
        assert len(grid) == 2 * 77
        assert set(grid["speaker"]) == {"new_speaker"}

    def test_with_categories(self, cal):
        grid = prediction_grid(cal, categories=["negative", "positive"])
        assert len(grid) == 2 * 77 * 2


class TestCategoryFit:

    def test_fit_summary(self, negative_fit, panel):
        assert negative_fit.n_obs == (panel["category"] == "negative").sum()
        assert negative_fit.parties == ["D", "R"]
        assert negative_fit.slope_party == "R"

        fe = negative_fit.fixed_effects()
        assert {"coef", "se", "pval"} <= set(fe.columns)
        assert "Intercept" in fe.index

        vc = negative_fit.variance_components()
        assert set(vc["component"]) == {"speaker", "day", "day_party", "residual"}
        assert (vc["variance"] >= 0).all()
        assert isinstance(negative_fit.singular, bool)

    def test_new_speaker_prediction_full_calendar(self, negative_fit, cal):
        pred = negative_fit.predict(prediction_grid(cal))
        assert len(pred) == 2 * 77
        assert np.isfinite(pred).all()

    def test_unobserved_day_is_fixed_effects_only(self, negative_fit, cal):
        grid = prediction_grid(cal)
        row = grid[(grid["date"] == "1998-11-01") & (grid["party"] == "R")]
        expected = np.asarray(negative_fit.result.predict(exog=row), dtype=float)
        assert negative_fit.predict(row).to_numpy() == pytest.approx(expected)

    def test_observed_speaker_shifts_by_its_effect(self, negative_fit, cal):
        grid = prediction_grid(cal)
        grid = grid[grid["party"] == "D"]
        known = grid.assign(speaker="D0")

        diff = negative_fit.predict(known).to_numpy() - negative_fit.predict(grid).to_numpy()
        effect = negative_fit.effects["speaker"].get("D0", 0.0)
        assert diff == pytest.approx(np.full(len(grid), effect))

    def test_unknown_party(self, negative_fit, cal):
        grid = prediction_grid(cal, parties=("D", "I"))
        with pytest.raises(InvalidParameter):
            negative_fit.predict(grid)

    def test_grid_missing_columns(self, negative_fit, cal):
        grid = prediction_grid(cal).drop(columns=["impeachment_2"])
        with pytest.raises(SchemaMismatch):
            negative_fit.predict(grid)


class TestBoundaryFit:
    """Speakers and days share one rate: their variances belong at zero."""

    @pytest.fixture(scope="class")
    def flat_panel(self):
        rng = np.random.default_rng(11)
        rows = []
        for s in range(12):
            party = "R" if s >= 6 else "D"
            for day in range(1, 31):
                imp1, imp2 = int(day == 8), int(day == 22)
                rep = int(party == "R")
                rows.append({
                    "party": party, "speaker": f"{party}{s}", "day_index": day,
                    "category": "negative", "impeachment_1": imp1, "impeachment_2": imp2,
                    "republican": rep,
                    "proportion": 0.05 + 0.03 * rep * imp1 + rng.normal(0, 0.004),
                })
        return pd.DataFrame(rows)

    @pytest.fixture(scope="class")
    def flat_fit(self, flat_panel):
        return fit_mixed_model(flat_panel, category="negative")

    def test_returns_singular_fit(self, flat_fit):
        assert flat_fit.singular is True
        vc = flat_fit.variance_components().set_index("component")["variance"]
        assert np.isfinite(vc).all()
        assert vc["speaker"] < vc["residual"]

    def test_new_speaker_predictions_finite(self, flat_fit):
        cal = calendar("1998-10-01", "1998-10-30", event_dates=("1998-10-08", "1998-10-22"))
        pred = flat_fit.predict(prediction_grid(cal))
        assert len(pred) == 2 * 30
        assert np.isfinite(pred).all()

    def test_fixed_part_recovers_event_jump(self, flat_fit):
        fe = flat_fit.fixed_effects()["coef"]
        jump = fe["party[T.R]:impeachment_1"]
        assert jump == pytest.approx(0.03, abs=0.01)

    def test_unconverged_but_finite_fit_is_kept(self, flat_panel, monkeypatch):
        real_fit = MixedLM.fit

        def unconverged(self, **kw):
            result = real_fit(self, **kw)
            result.converged = False
            return result

        monkeypatch.setattr(MixedLM, "fit", unconverged)
        fit = fit_mixed_model(flat_panel, category="negative")
        assert fit.converged is False
        assert fit.singular is True


class TestByCategory:

    def test_one_fit_per_category(self, panel):
        fits = fit_by_category(panel, ["negative", "positive"])
        assert list(fits) == ["negative", "positive"]
        assert all(f.category == c for c, f in fits.items())

    def test_stops_on_missing_category(self, panel):
        with pytest.raises(UnmatchedCategory):
            fit_by_category(panel, ["negative", "trust"])


class TestJointFit:

    def test_predicts_every_category(self, joint_fit, cal):
        assert joint_fit.categories == ["negative", "positive"]
        grid = prediction_grid(cal, categories=["negative", "positive"])
        pred = joint_fit.predict(grid)
        assert len(pred) == len(grid)
        assert np.isfinite(pred).all()

    def test_category_effects_reported(self, joint_fit):
        components = set(joint_fit.variance_components()["component"])
        assert {"category", "category_imp1", "category_imp2"} <= components

    def test_unseen_category(self, joint_fit, cal):
        grid = prediction_grid(cal, categories=["negative", "trust"])
        with pytest.raises(UnmatchedCategory):
            joint_fit.predict(grid)


class TestFailures:

    def test_category_without_rows(self, panel):
        with pytest.raises(UnmatchedCategory):
            fit_mixed_model(panel, category="trust")

    def test_single_party(self, panel):
        with pytest.raises(InvalidParameter):
            fit_mixed_model(panel[panel["party"] == "D"], category="negative")

    def test_category_and_joint(self, panel):
        with pytest.raises(InvalidParameter):
            fit_mixed_model(panel, category="negative", joint=True)

    def test_missing_republican_column(self, panel):
        with pytest.raises(SchemaMismatch):
            fit_mixed_model(panel.drop(columns=["republican"]), category="negative")

    def test_non_finite_estimates(self, panel, monkeypatch):
        def stalled(self, **kw):
            return SimpleNamespace(converged=False, fe_params=pd.Series([np.nan, 0.1]),
                                   vcomp=np.array([1e-4, np.nan]))

        monkeypatch.setattr(MixedLM, "fit", stalled)
        with pytest.raises(ConvergenceError):
            fit_mixed_model(panel, category="negative")

    def test_no_estimates(self, panel, monkeypatch):
        monkeypatch.setattr(MixedLM, "fit", lambda self, **kw: SimpleNamespace(converged=False))
        with pytest.raises(ConvergenceError):
            fit_mixed_model(panel, category="negative")

    def test_singular_matrix(self, panel, monkeypatch):
        def boom(self, **kw):
            raise np.linalg.LinAlgError("Singular matrix")

        monkeypatch.setattr(MixedLM, "fit", boom)
        with pytest.raises(ConvergenceError):
            fit_mixed_model(panel, category="negative")
