import numpy as np
import pandas as pd
import pytest

from floor_sentiment.errors import InvalidParameter, UnmatchedCategory
from floor_sentiment.fixed_effects import INTERACTIONS, fit_event_did


@pytest.fixture
def did_panel():
    """Speaker and day effects plus a 0.03 Republican jump on the first event day."""
    rng = np.random.default_rng(0)
    rows = []
    for s in range(10):
        party = "R" if s >= 5 else "D"
        for day in range(1, 21):
            imp1, imp2 = int(day == 5), int(day == 15)
            rep = int(party == "R")
            y = 0.05 + 0.002 * s + 0.001 * day + 0.03 * rep * imp1 + 0.01 * rep * imp2
            rows.append({
                "party": party, "speaker": f"{party}{s}", "day_index": day,
                "category": "negative", "impeachment_1": imp1, "impeachment_2": imp2,
                "republican": rep, "proportion": y + rng.normal(0, 0.001),
            })
    return pd.DataFrame(rows)


def test_recovers_interaction(did_panel):
    out = fit_event_did(did_panel, category="negative").set_index("term")
    assert list(out.index) == INTERACTIONS
    assert out.loc["rep_x_impeachment_1", "coef"] == pytest.approx(0.03, abs=0.003)
    assert out.loc["rep_x_impeachment_2", "coef"] == pytest.approx(0.01, abs=0.003)
    assert (out["ci_lo"] <= out["coef"]).all() and (out["coef"] <= out["ci_hi"]).all()
    assert (out["N"] == 200).all()
    assert (out["category"] == "negative").all()


def test_pooled_label(did_panel):
    out = fit_event_did(did_panel)
    assert (out["category"] == "pooled").all()


def test_category_without_rows(did_panel):
    with pytest.raises(UnmatchedCategory):
        fit_event_did(did_panel, category="trust")


def test_needs_party_indicator(did_panel):
    with pytest.raises(InvalidParameter):
        fit_event_did(did_panel.drop(columns=["republican"]))
