"""Shared synthetic corpora for the pipeline tests."""

import numpy as np
import pandas as pd
import pytest

from floor_sentiment.lexicons import lexicon_from_mapping

FILLER = ["the", "house", "bill", "member", "vote", "committee", "time", "state"]


def make_tokens(rows):
    """rows: (doc_id, speaker, party, date, words) -> long token table."""
    out = []
    for doc_id, speaker, party, date, words in rows:
        for w in words:
            out.append({
                "doc_id": doc_id, "word": w, "speaker": speaker, "party": party,
                "district": 1, "state": "VA", "date": pd.Timestamp(date),
            })
    return pd.DataFrame(out)


@pytest.fixture
def good_bad_lexicon():
    return lexicon_from_mapping({"good": "positive", "bad": "negative"})


@pytest.fixture
def three_doc_tokens():
    """Party A: 2 docs, 20 tokens, 2 x "good". Party B: 1 doc, 10 tokens, 1 x "bad"."""
    return make_tokens([
        (1, "Smith", "A", "1998-10-01", ["good"] + ["the"] * 9),
        (2, "Jones", "A", "1998-10-02", ["good"] + ["house"] * 9),
        (3, "Brown", "B", "1998-10-02", ["bad"] + ["bill"] * 9),
    ])


@pytest.fixture(scope="session")
def floor_corpus():
    """
    12 speakers (6 D, 6 R) speaking on 13 days around both event dates.
    Republicans use more negative words on the event days; speakers differ
    in their baseline rates.
    """
    rng = np.random.default_rng(7)
    days = list(pd.date_range("1998-10-05", "1998-10-12")) + \
        list(pd.date_range("1998-12-16", "1998-12-20"))
    speakers = [(f"D{i}", "D") for i in range(6)] + [(f"R{i}", "R") for i in range(6)]
    events = {pd.Timestamp("1998-10-08"), pd.Timestamp("1998-12-19")}

    rows, doc_id = [], 0
    for s_i, (speaker, party) in enumerate(speakers):
        base = 0.04 + 0.01 * (s_i % 3)
        for day in days:
            p_neg = base + rng.normal(0, 0.005)
            if party == "R" and day in events:
                p_neg += 0.04
            p_pos = 0.05 + rng.normal(0, 0.005)
            n = 200
            draws = rng.random(n)
            words = np.where(
                draws < p_neg, "bad",
                np.where(draws < p_neg + p_pos, "good", rng.choice(FILLER, n)),
            )
            doc_id += 1
            rows.append((doc_id, speaker, party, day, list(words)))

    # one Independent, dropped before modelling
    rows.append((doc_id + 1, "I0", "I", days[0], ["bad", "good"] + ["the"] * 20))
    return make_tokens(rows)
