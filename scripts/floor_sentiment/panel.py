"""
Speaker-day panel for the impeachment regressions.

One row per (party, speaker, date, category) with that speaker's token
total for the day, the number of lexicon matches and their proportion.
The calendar runs daily from the first to the last date of the token
table it is built from, so train and test panels each carry their own
day_index scale (1 = first day of that sample).
"""

import numpy as np
import pandas as pd

from floor_sentiment.config import EVENT_COLUMNS, EVENT_DATES
from floor_sentiment.errors import InvalidParameter
from floor_sentiment.matching import count_sentiment

SPEAKER_DAY = ["party", "speaker", "date"]
PANEL_COLUMNS = SPEAKER_DAY + ["category", "total", "n", "proportion", "day_index", *EVENT_COLUMNS]


def calendar(start, end, event_dates=EVENT_DATES) -> pd.DataFrame:
    """Daily date range [start, end] with day_index (from 1) and event indicators."""
    if len(event_dates) != len(EVENT_COLUMNS):
        raise InvalidParameter(f"Expected {len(EVENT_COLUMNS)} event dates, got {len(event_dates)}")

    start, end = pd.Timestamp(start).normalize(), pd.Timestamp(end).normalize()
    if start > end:
        raise InvalidParameter(f"Calendar start {start.date()} is after end {end.date()}")

    cal = pd.DataFrame({"date": pd.date_range(start, end, freq="D")})
    cal["day_index"] = np.arange(1, len(cal) + 1)
    for col, day in zip(EVENT_COLUMNS, event_dates):
        cal[col] = (cal["date"] == pd.Timestamp(day)).astype(int)
    return cal


def _complete_categories(tokens: pd.DataFrame, counts: pd.DataFrame, categories) -> pd.DataFrame:
    totals = tokens.groupby(SPEAKER_DAY, observed=True).size().rename("total").reset_index()
    grid = totals.merge(pd.DataFrame({"category": sorted(categories)}), how="cross")
    out = grid.merge(
        counts[SPEAKER_DAY + ["category", "n"]],
        on=SPEAKER_DAY + ["category"],
        how="left",
    )
    out["n"] = out["n"].fillna(0).astype(int)
    out["proportion"] = out["n"] / out["total"]
    return out


def build_panel(tokens: pd.DataFrame, lexicon: pd.DataFrame,
                event_dates=EVENT_DATES, fill_zeros: bool = False) -> pd.DataFrame:
    """
    Count lexicon matches per speaker-day and attach day_index and the
    two event indicators.

    With fill_zeros=True every observed speaker-day gets a row for every
    lexicon category, zero matches included.
    """
    if tokens.empty:
        raise InvalidParameter("Cannot build a panel from an empty token table")

    tokens = tokens.assign(date=pd.to_datetime(tokens["date"]).dt.normalize())
    counts = count_sentiment(tokens, lexicon, by=SPEAKER_DAY)

    if fill_zeros:
        counts = _complete_categories(tokens, counts, lexicon["category"].unique())

    cal = calendar(tokens["date"].min(), tokens["date"].max(), event_dates)
    panel = counts.merge(cal, on="date", how="left", validate="m:1")

    panel = panel[PANEL_COLUMNS].sort_values(SPEAKER_DAY + ["category"])
    return panel.reset_index(drop=True)


def two_party(panel: pd.DataFrame, parties=("D", "R")) -> pd.DataFrame:
    """
    Keep the two parties of the regression contrast and add the numeric
    `republican` indicator used by the by-date party slopes.
    """
    parties = list(parties)
    if len(parties) != 2:
        raise InvalidParameter(f"A two-level party contrast needs two labels, got {parties}")

    out = panel[panel["party"].isin(parties)].copy()
    out["republican"] = (out["party"] == parties[1]).astype(int)
    return out.reset_index(drop=True)
