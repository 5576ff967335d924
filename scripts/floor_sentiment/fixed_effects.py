"""
Two-way fixed-effects check on the speaker-day panel.

    proportion ~ rep_x_impeachment_1 + rep_x_impeachment_2 | speaker + day_index

Speaker FE absorb party, day FE absorb the event indicators, so only the
party × event interactions are identified.  SEs clustered by speaker.
"""

import pandas as pd
import pyfixest as pf

from floor_sentiment.config import EVENT_COLUMNS
from floor_sentiment.errors import InvalidParameter, UnmatchedCategory

INTERACTIONS = [f"rep_x_{col}" for col in EVENT_COLUMNS]


def fit_event_did(panel: pd.DataFrame, category=None, cluster: str = "speaker") -> pd.DataFrame:
    """Run the FE regression for one category (or the pooled panel) and return tidy coefficients."""
    df = panel
    if category is not None:
        df = panel[panel["category"] == category]
        if df.empty:
            raise UnmatchedCategory(f"No panel rows for category '{category}'")
    if "republican" not in df.columns:
        raise InvalidParameter("Panel has no 'republican' column (run panel.two_party first)")

    df = df.copy()
    for col, inter in zip(EVENT_COLUMNS, INTERACTIONS):
        df[inter] = df["republican"] * df[col]

    fml = f"proportion ~ {' + '.join(INTERACTIONS)} | speaker + day_index"
    m = pf.feols(fml, data=df, vcov={"CRV1": cluster})
    t = m.tidy()

    rows = []
    for term in INTERACTIONS:
        if term not in t.index:
            # dropped as collinear with the fixed effects
            rows.append({"term": term, "coef": float("nan"), "se": float("nan"),
                         "pval": float("nan"), "ci_lo": float("nan"), "ci_hi": float("nan")})
            continue
        r = t.loc[term]
        rows.append({"term": term, "coef": r["Estimate"], "se": r["Std. Error"],
                     "pval": r["Pr(>|t|)"], "ci_lo": r["2.5%"], "ci_hi": r["97.5%"]})

    out = pd.DataFrame(rows)
    out["category"] = category if category is not None else "pooled"
    out["N"] = m._N
    return out
