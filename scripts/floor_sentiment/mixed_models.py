"""
Linear mixed-effects models of speaker-day sentiment proportions.

Fixed effects:
    proportion ~ party * impeachment_1 + party * impeachment_2

Random effects (crossed, so all rows sit in one statsmodels group and
each factor enters as a variance component):
    speaker    intercept per speaker
    day        intercept per day_index
    day_party  slope on the republican indicator per day_index
Joint ("all sentiment") model, additionally:
    category        intercept per category
    category_imp1   slope on impeachment_1 per category
    category_imp2   slope on impeachment_2 per category

Predictions for an unseen speaker are population-level: the speaker
effect is zero, while day and category effects apply whenever the key
was observed during fitting.
"""

import re
import warnings

import numpy as np
import pandas as pd
import statsmodels.formula.api as smf
from statsmodels.tools.sm_exceptions import ConvergenceWarning

from floor_sentiment.config import EVENT_COLUMNS
from floor_sentiment.errors import (
    ConvergenceError, InvalidParameter, SchemaMismatch, UnmatchedCategory,
)

FIXED_FORMULA = "proportion ~ party * impeachment_1 + party * impeachment_2"

SPEAKER_DAY_VC = {
    "speaker":   "0 + C(speaker)",
    "day":       "0 + C(day_index)",
    "day_party": "0 + C(day_index):republican",
}
CATEGORY_VC = {
    "category":      "0 + C(category)",
    "category_imp1": "0 + C(category):impeachment_1",
    "category_imp2": "0 + C(category):impeachment_2",
}

# variance component -> (key column, slope column)
EFFECT_KEYS = {
    "speaker":       ("speaker", None),
    "day":           ("day_index", None),
    "day_party":     ("day_index", "republican"),
    "category":      ("category", None),
    "category_imp1": ("category", "impeachment_1"),
    "category_imp2": ("category", "impeachment_2"),
}

# tried in turn until one reports convergence
FIT_METHODS = ["lbfgs", "bfgs", "cg", "nm", "powell"]

# "speaker[C(speaker)[Bob Barr]]", "day_party[C(day_index)[12]:republican]"
_RE_NAME = re.compile(r"^(?P<vc>\w+)\[C\(\w+\)\[(?P<level>.*)\](?::\w+)?\]$")


def _model_frame(panel: pd.DataFrame, category=None, joint: bool = False) -> pd.DataFrame:
    required = ["proportion", "party", "speaker", "day_index", "republican", *EVENT_COLUMNS]
    if joint or category is not None:
        required.append("category")
    missing = [c for c in required if c not in panel.columns]
    if missing:
        raise SchemaMismatch(
            f"Panel is missing columns {missing} (build it with panel.build_panel + panel.two_party)"
        )

    data = panel
    if category is not None:
        data = panel[panel["category"] == category]
        if data.empty:
            raise UnmatchedCategory(f"No panel rows for category '{category}'")

    if data.empty:
        raise InvalidParameter("Cannot fit a model to an empty panel")
    if data["party"].nunique() != 2:
        raise InvalidParameter(
            f"Model needs exactly two parties, found {sorted(data['party'].unique())}"
        )

    data = data.copy()
    data["day_index"] = data["day_index"].astype(int)
    data["group"] = 1
    return data.reset_index(drop=True)


def _random_effect_tables(result):
    """Split the single-group BLUP vector into {component: {level: value}}."""
    tables = {name: {} for name in EFFECT_KEYS}
    try:
        blups = next(iter(result.random_effects.values()))
    except (ValueError, np.linalg.LinAlgError) as e:
        print(f"    WARNING: random effects not estimable ({e}); treating them as zero")
        return tables, True

    degenerate = False
    for name, value in blups.items():
        m = _RE_NAME.match(str(name))
        if m is None:
            continue
        if not np.isfinite(value):
            degenerate = True
            value = 0.0
        tables[m.group("vc")][m.group("level")] = float(value)

    if degenerate:
        print("    WARNING: non-finite random effects (zero variance); set to zero")
    return tables, degenerate


def _usable(result) -> bool:
    """Finite fixed effects and variance components, converged or not."""
    try:
        fe = np.asarray(result.fe_params, dtype=float)
        vcomp = np.asarray(result.vcomp, dtype=float)
    except AttributeError:
        return False
    return fe.size > 0 and bool(np.isfinite(fe).all()) and bool(np.isfinite(vcomp).all())


class MixedModelFit:
    """A fitted sentiment mixed model and the lookups needed to predict from it."""

    def __init__(self, result, data: pd.DataFrame, category=None, joint: bool = False,
                 fit_warnings=()):
        self.result = result
        self.category = category
        self.joint = joint
        self.fit_warnings = list(fit_warnings)
        self.converged = bool(getattr(result, "converged", True))
        self.n_obs = len(data)

        self.parties = sorted(data["party"].unique())
        slope_party = data.loc[data["republican"] == 1, "party"].unique()
        self.slope_party = slope_party[0] if len(slope_party) else None
        self.categories = sorted(data["category"].unique()) if "category" in data else []
        self.speakers = set(data["speaker"].unique())

        self.effects, self.degenerate = _random_effect_tables(result)

    @property
    def singular(self) -> bool:
        """
        True when a variance component sits at (or next to) zero: the
        optimizer reported the boundary or a non-definite Hessian, stopped
        short of convergence, or left BLUPs that are not estimable.
        """
        vcomp = np.asarray(getattr(self.result, "vcomp", []), dtype=float)
        boundary = any("boundary" in m or "Hessian" in m for m in self.fit_warnings)
        return (boundary or not self.converged or self.degenerate
                or bool((vcomp <= 1e-10).any()))

    def fixed_effects(self) -> pd.DataFrame:
        fe = self.result.fe_params
        return pd.DataFrame({
            "coef": fe,
            "se": self.result.bse_fe,
            "pval": self.result.pvalues[fe.index],
        })

    def variance_components(self) -> pd.DataFrame:
        names = list(self.result.model.exog_vc.names)
        rows = [{"component": n, "variance": float(v)} for n, v in zip(names, self.result.vcomp)]
        rows.append({"component": "residual", "variance": float(self.result.scale)})
        return pd.DataFrame(rows)

    def _lookup(self, component: str, keys: pd.Series) -> np.ndarray:
        table = self.effects.get(component, {})
        return keys.astype(str).map(table).fillna(0.0).to_numpy(dtype=float)

    def predict(self, grid: pd.DataFrame) -> pd.Series:
        """
        Predicted proportion for each grid row.

        Speaker effects apply only to speakers seen during fitting, so a
        placeholder speaker gets the population-level prediction.
        """
        needed = ["party", "speaker", "day_index", *EVENT_COLUMNS]
        if self.joint:
            needed.append("category")
        missing = [c for c in needed if c not in grid.columns]
        if missing:
            raise SchemaMismatch(f"Prediction grid is missing columns {missing}")

        unknown_party = set(grid["party"]) - set(self.parties)
        if unknown_party:
            raise InvalidParameter(f"Parties not in the fitted model: {sorted(unknown_party)}")

        if "category" in grid.columns and (self.joint or self.category is not None):
            fitted = set(self.categories)
            unseen = set(grid["category"]) - fitted
            if unseen:
                raise UnmatchedCategory(f"Categories without observed rows: {sorted(unseen)}")

        grid = grid.copy()
        grid["day_index"] = grid["day_index"].astype(int)
        rep = (grid["party"] == self.slope_party).to_numpy(dtype=float)

        pred = np.asarray(self.result.predict(exog=grid), dtype=float)
        pred = pred + self._lookup("speaker", grid["speaker"])
        pred = pred + self._lookup("day", grid["day_index"])
        pred = pred + rep * self._lookup("day_party", grid["day_index"])

        if self.joint:
            cat = grid["category"]
            pred = pred + self._lookup("category", cat)
            pred = pred + grid["impeachment_1"].to_numpy(dtype=float) * self._lookup("category_imp1", cat)
            pred = pred + grid["impeachment_2"].to_numpy(dtype=float) * self._lookup("category_imp2", cat)

        return pd.Series(pred, index=grid.index, name="predicted")


def fit_mixed_model(panel: pd.DataFrame, category=None, joint: bool = False,
                    reml: bool = True, method=None) -> MixedModelFit:
    """
    Fit the impeachment mixed model.

    Args:
        panel:    two-party speaker-day panel (panel.two_party output)
        category: fit one sentiment category only
        joint:    fit all categories in `panel` together with category effects
        reml:     REML (True) or maximum likelihood (False)
        method:   optimizer name or list tried in turn

    Raises:
        UnmatchedCategory: `category` has no rows
        ConvergenceError:  the fit failed or left non-finite estimates

    A fit that stops at the variance boundary is returned with
    `singular` set rather than raised.
    """
    if joint and category is not None:
        raise InvalidParameter("Pass either category or joint=True, not both")

    data = _model_frame(panel, category=category, joint=joint)
    vc = dict(SPEAKER_DAY_VC)
    if joint:
        vc.update(CATEGORY_VC)

    model = smf.mixedlm(FIXED_FORMULA, data, groups="group", vc_formula=vc)

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        try:
            result = model.fit(reml=reml, method=method or FIT_METHODS)
        except (np.linalg.LinAlgError, ValueError) as e:
            raise ConvergenceError(f"Mixed model fit failed: {e}") from e

    fit_warnings = []
    for w in caught:
        if issubclass(w.category, ConvergenceWarning):
            fit_warnings.append(str(w.message))
        else:
            warnings.showwarning(w.message, w.category, w.filename, w.lineno)

    if not _usable(result):
        raise ConvergenceError(
            "Mixed model returned non-finite estimates: "
            + ("; ".join(fit_warnings) or "optimizer stopped")
        )

    fit = MixedModelFit(result, data, category=category, joint=joint, fit_warnings=fit_warnings)
    label = "all categories" if joint else (category or "pooled")
    print(f"    [{label}] N={fit.n_obs:,}, {len(fit.speakers)} speakers, "
          f"REML={reml}, converged={fit.converged}, singular={fit.singular}")
    for msg in fit_warnings:
        print(f"      note: {msg}")
    return fit


def fit_by_category(panel: pd.DataFrame, categories, reml: bool = True) -> dict:
    """Separate fits for each category; stops at the first failure."""
    return {cat: fit_mixed_model(panel, category=cat, reml=reml) for cat in categories}


def prediction_grid(cal: pd.DataFrame, parties=("D", "R"), categories=None,
                    speaker: str = "new_speaker") -> pd.DataFrame:
    """
    Every party × placeholder speaker × calendar day (× category) row.

    `cal` is a panel.calendar frame covering the full date range.
    """
    base = cal[["date", "day_index", *EVENT_COLUMNS]]
    grid = pd.DataFrame({"party": list(parties)}).merge(base, how="cross")
    grid["speaker"] = speaker
    if categories is not None:
        grid = grid.merge(pd.DataFrame({"category": list(categories)}), how="cross")
    return grid.reset_index(drop=True)
