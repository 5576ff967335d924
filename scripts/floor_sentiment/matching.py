"""
Dictionary ("word count") matching of a token table against a lexicon.

Counting rules:
  - total      = tokens in the group, taken from the full token table
  - n          = tokens in the group whose word is listed under the category
  - proportion = n / total, no smoothing

A word listed under several categories counts toward each of them, so
proportions of different categories in one group overlap and need not
sum to anything in particular.

Zero convention: a (group, category) pair with no match produces no row.
Callers that need explicit zeros complete the grid themselves
(see panel.build_panel(fill_zeros=True)).
"""

import pandas as pd

from floor_sentiment.config import GROUPINGS
from floor_sentiment.errors import InvalidParameter, SchemaMismatch

COUNT_COLUMNS = ["category", "n", "total", "proportion"]


def _check_inputs(tokens: pd.DataFrame, lexicon: pd.DataFrame, by):
    if "word" not in tokens.columns:
        raise SchemaMismatch("Token table has no 'word' column")
    for col in ("word", "category"):
        if col not in lexicon.columns:
            raise SchemaMismatch(f"Lexicon has no '{col}' column")

    missing = [c for c in by if c not in tokens.columns]
    if missing:
        raise InvalidParameter(f"Unknown grouping columns: {missing}")
    if len(set(by)) != len(by):
        raise InvalidParameter(f"Duplicate grouping columns: {by}")


def count_sentiment(tokens: pd.DataFrame, lexicon: pd.DataFrame, by=None) -> pd.DataFrame:
    """
    Count lexicon matches per group and category.

    Args:
        tokens:  long token table (one row per token)
        lexicon: word/category table
        by:      list of grouping columns; empty or None = whole corpus

    Returns:
        DataFrame with columns by + [category, n, total, proportion],
        ordered by group then descending proportion.
    """
    by = list(by or [])
    _check_inputs(tokens, lexicon, by)

    lexicon = lexicon[["word", "category"]].drop_duplicates()
    matched = tokens[by + ["word"]].merge(lexicon, on="word", how="inner")

    if by:
        totals = (
            tokens.groupby(by, dropna=False, observed=True)
            .size()
            .rename("total")
            .reset_index()
        )
        out = (
            matched.groupby(by + ["category"], dropna=False, observed=True)
            .size()
            .rename("n")
            .reset_index()
        )
        out = out.merge(totals, on=by, how="left")
    else:
        out = matched.groupby("category").size().rename("n").reset_index()
        out["total"] = len(tokens)

    out["proportion"] = out["n"] / out["total"]

    out = out.sort_values(by + ["proportion"], ascending=[True] * len(by) + [False])
    return out[by + COUNT_COLUMNS].reset_index(drop=True)


def resolve_grouping(grouping):
    """Accept a preset name from config.GROUPINGS or an explicit column list."""
    if isinstance(grouping, str):
        if grouping not in GROUPINGS:
            raise InvalidParameter(
                f"Unknown grouping '{grouping}'; choose from {sorted(GROUPINGS)}"
            )
        return list(GROUPINGS[grouping])
    return list(grouping or [])


def count_by(tokens: pd.DataFrame, lexicon: pd.DataFrame, grouping) -> pd.DataFrame:
    """count_sentiment with a named grouping preset ("party", "speaker_day", ...)."""
    return count_sentiment(tokens, lexicon, by=resolve_grouping(grouping))


def top_words(tokens: pd.DataFrame, lexicon: pd.DataFrame, by=None, n: int = 10) -> pd.DataFrame:
    """Most frequent matched words per category (and group)."""
    by = list(by or [])
    _check_inputs(tokens, lexicon, by)
    if n < 1:
        raise InvalidParameter(f"n must be positive, got {n}")

    lexicon = lexicon[["word", "category"]].drop_duplicates()
    matched = tokens[by + ["word"]].merge(lexicon, on="word", how="inner")

    keys = by + ["category"]
    counts = (
        matched.groupby(keys + ["word"], dropna=False, observed=True)
        .size()
        .rename("count")
        .reset_index()
        .sort_values(keys + ["count", "word"], ascending=[True] * len(keys) + [False, True])
    )
    return counts.groupby(keys, dropna=False, observed=True).head(n).reset_index(drop=True)
