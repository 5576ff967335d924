"""
Sentiment lexicons as (word, category) tables.

Every source is reduced to the same two-column shape so the matcher can
treat them interchangeably.  A word may belong to several categories
(NRC lists "fear" under both fear and negative); duplicate pairs are
collapsed.
"""

from pathlib import Path

import pandas as pd

from floor_sentiment.errors import LoadError

LEXICON_COLUMNS = ["word", "category"]


def _tidy(lex: pd.DataFrame) -> pd.DataFrame:
    lex = lex[LEXICON_COLUMNS].dropna()
    lex = lex.astype({"word": str, "category": str})
    return lex.drop_duplicates().sort_values(LEXICON_COLUMNS).reset_index(drop=True)


def lexicon_from_mapping(mapping: dict) -> pd.DataFrame:
    """Build a lexicon from {word: category} or {word: [category, ...]}."""
    rows = []
    for word, cats in mapping.items():
        if isinstance(cats, str):
            cats = [cats]
        rows.extend((word, c) for c in cats)
    return _tidy(pd.DataFrame(rows, columns=LEXICON_COLUMNS))


def load_lexicon(path) -> pd.DataFrame:
    """Load a two-column word/category table (.csv, .tsv/.txt or .parquet)."""
    path = Path(path)
    if not path.exists():
        raise LoadError(f"Lexicon not found: {path}")

    suffix = path.suffix.lower()
    try:
        if suffix == ".parquet":
            lex = pd.read_parquet(path)
        elif suffix in (".tsv", ".txt"):
            lex = pd.read_csv(path, sep="\t")
        else:
            lex = pd.read_csv(path)
    except Exception as e:
        raise LoadError(f"Could not read lexicon {path}: {e}") from e

    missing = [c for c in LEXICON_COLUMNS if c not in lex.columns]
    if missing:
        raise LoadError(f"Lexicon {path} is missing columns: {missing}")
    return _tidy(lex)


def load_nrc_lexicon(path) -> pd.DataFrame:
    """
    Load the NRC Word-Emotion Association Lexicon (word-level file).

    Each line is ``word<TAB>emotion<TAB>0|1``; only associations flagged 1
    are kept.  Categories: the eight emotions plus positive/negative.
    """
    path = Path(path)
    if not path.exists():
        raise LoadError(f"NRC lexicon not found: {path}")

    try:
        raw = pd.read_csv(
            path, sep="\t", header=None, names=["word", "category", "flag"],
            keep_default_na=False,
        )
    except Exception as e:
        raise LoadError(f"Could not read NRC lexicon {path}: {e}") from e

    flag = pd.to_numeric(raw["flag"], errors="coerce")
    if flag.isna().any():
        raise LoadError(f"NRC lexicon {path} has non-numeric association flags")

    return _tidy(raw[flag == 1])


def bing_lexicon() -> pd.DataFrame:
    """
    Hu & Liu (2004) opinion lexicon from NLTK's corpora: positive/negative.

    Requires ``nltk.download("opinion_lexicon")``.
    """
    from nltk.corpus import opinion_lexicon

    try:
        pos = list(opinion_lexicon.positive())
        neg = list(opinion_lexicon.negative())
    except LookupError as e:
        raise LoadError(f"NLTK opinion_lexicon corpus unavailable: {e}") from e

    lex = pd.DataFrame(
        [(w, "positive") for w in pos] + [(w, "negative") for w in neg],
        columns=LEXICON_COLUMNS,
    )
    return _tidy(lex)


def resolve_lexicon(name, nrc_path=None) -> pd.DataFrame:
    """Map a config value ("nrc", "bing", or a file path) to a lexicon table."""
    if name == "nrc":
        if nrc_path is None:
            raise LoadError("NRC lexicon requested but no path given")
        return load_nrc_lexicon(nrc_path)
    if name == "bing":
        return bing_lexicon()
    return load_lexicon(name)
