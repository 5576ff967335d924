"""
Sentence-level VADER scoring of the raw speech text.

VADER is negation- and intensifier-aware, which word counting is not.
Each document is normalized, split into sentences, every sentence gets
VADER's compound score in [-1, 1], and the document score is the mean
over its sentences.

Floor speech is full of abbreviations ("Mr. Speaker", "H.R. 10",
"U.S.") that would otherwise end a sentence, so those periods are
dropped before splitting.
"""

import re

import numpy as np
import pandas as pd
from scipy.stats import pearsonr
from tqdm import tqdm
from vaderSentiment.vaderSentiment import SentimentIntensityAnalyzer

from floor_sentiment.corpus import check_join_keys
from floor_sentiment.errors import InvalidParameter, SchemaMismatch, UnmatchedCategory

NORMALIZATION_RULES = [
    (r"\bMr\.", "Mr"),
    (r"\bMrs\.", "Mrs"),
    (r"\bMs\.", "Ms"),
    (r"\bDr\.", "Dr"),
    (r"\bH\.\s?R\.", "HR"),
    (r"\bH\.\s?Res\.", "H Res"),
    (r"\bH\.\s?Con\.\s?Res\.", "H Con Res"),
    (r"\bS\.\s?Res\.", "S Res"),
    (r"\bU\.S\.", "US"),
    (r"\bJr\.", "Jr"),
    (r"\bSr\.", "Sr"),
    (r"\bSt\.", "St"),
    (r"\bNo\.(?=\s*\d)", "No"),
    (r"\bvs\.", "vs"),
]
_RULES = [(re.compile(p), r) for p, r in NORMALIZATION_RULES]
_SENTENCE_END = re.compile(r"(?<=[.!?])\s+")

AGGREGATION_LEVELS = (("party", "date"), ("party", "speaker", "date"))


def normalize_text(text: str) -> str:
    for pattern, repl in _RULES:
        text = pattern.sub(repl, text)
    return re.sub(r"\s+", " ", text).strip()


def split_sentences(text: str) -> list:
    return [s for s in _SENTENCE_END.split(text) if s.strip()]


def score_text(text, analyzer) -> tuple:
    """(number of sentences, mean compound score); NaN when there is no sentence."""
    if not isinstance(text, str):
        return 0, np.nan
    sentences = split_sentences(normalize_text(text))
    if not sentences:
        return 0, np.nan
    scores = [analyzer.polarity_scores(s)["compound"] for s in sentences]
    return len(scores), float(np.mean(scores))


def score_documents(documents: pd.DataFrame, analyzer=None, text_col: str = "text") -> pd.DataFrame:
    """One VADER score per document: columns doc_id, n_sentences, vader."""
    for col in ("doc_id", text_col):
        if col not in documents.columns:
            raise SchemaMismatch(f"Document table has no '{col}' column")

    analyzer = analyzer or SentimentIntensityAnalyzer()
    rows = []
    for doc_id, text in tqdm(zip(documents["doc_id"], documents[text_col]),
                             total=len(documents), desc="  VADER", leave=False):
        n, score = score_text(text, analyzer)
        rows.append((doc_id, n, score))

    return pd.DataFrame(rows, columns=["doc_id", "n_sentences", "vader"])


def aggregate_scores(scores: pd.DataFrame, documents: pd.DataFrame, by=("party", "date")) -> pd.DataFrame:
    """Merge document scores onto the document table and average per group."""
    by = list(by)
    if tuple(by) not in AGGREGATION_LEVELS:
        raise InvalidParameter(f"Aggregate at one of {AGGREGATION_LEVELS}, got {tuple(by)}")
    check_join_keys(scores, documents)

    try:
        merged = documents[["doc_id", *by]].merge(scores, on="doc_id", how="inner", validate="1:1")
    except pd.errors.MergeError as e:
        raise SchemaMismatch(f"doc_id is not unique: {e}") from e

    return (
        merged.groupby(by, observed=True)
        .agg(vader=("vader", "mean"), n_docs=("doc_id", "count"))
        .reset_index()
    )


def compare_measures(dictionary_counts: pd.DataFrame, vader_means: pd.DataFrame,
                     category: str, on=("party", "date")):
    """
    Align one dictionary category's proportions with VADER means.

    Returns (aligned frame, summary dict with Pearson r, p-value and n).
    """
    on = list(on)
    dic = dictionary_counts[dictionary_counts["category"] == category]
    if dic.empty:
        raise UnmatchedCategory(f"No dictionary rows for category '{category}'")

    aligned = (
        dic[on + ["proportion"]]
        .merge(vader_means[on + ["vader"]], on=on, how="inner")
        .dropna(subset=["proportion", "vader"])
        .reset_index(drop=True)
    )

    r, p = np.nan, np.nan
    if len(aligned) >= 3 and aligned["proportion"].nunique() > 1 and aligned["vader"].nunique() > 1:
        r, p = pearsonr(aligned["proportion"], aligned["vader"])
    summary = {"category": category, "r": float(r), "pval": float(p), "n": len(aligned)}
    return aligned, summary
