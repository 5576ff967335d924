"""
Per-document category counts from a LIWC-format dictionary
(e.g., the Moral Foundations Dictionary, mfd2.0.dic).

The .dic file is parsed by the `liwc` package, which handles the
%-delimited category header and trailing-* wildcard patterns.  Counting
goes through CountVectorizer with an analyzer that emits the matched
category names for every token, and a fixed vocabulary equal to the
declared categories, so every category gets a column even when nothing
matches.  A token matching two categories counts once in each.
"""

from pathlib import Path

import liwc
import pandas as pd
from sklearn.feature_extraction.text import CountVectorizer

from floor_sentiment.corpus import check_join_keys
from floor_sentiment.errors import LoadError, SchemaMismatch


def load_liwc_dictionary(path):
    """Return (parse_token, category_names) for a LIWC .dic file."""
    path = Path(path)
    if not path.exists():
        raise LoadError(f"Dictionary not found: {path}")

    try:
        parse, categories = liwc.load_token_parser(str(path))
    except (KeyError, ValueError, IndexError, UnicodeDecodeError) as e:
        raise LoadError(f"Malformed dictionary {path}: {e}") from e

    categories = list(categories)
    if not categories:
        raise LoadError(f"Dictionary {path} declares no categories")
    if len(set(categories)) != len(categories):
        raise LoadError(f"Dictionary {path} declares duplicate category names")
    return parse, categories


class CategoryAnalyzer:
    """CountVectorizer analyzer: list of tokens -> matched category names."""

    def __init__(self, parse):
        self.parse = parse

    def __call__(self, tokens):
        features = []
        for token in tokens:
            features.extend(self.parse(str(token).lower()))
        return features


def count_categories(tokens: pd.DataFrame, parse, categories, doc_ids=None) -> pd.DataFrame:
    """
    Documents × categories count matrix (index doc_id, one column per category).

    Documents listed in `doc_ids` but absent from `tokens` get a zero row.
    """
    for col in ("doc_id", "word"):
        if col not in tokens.columns:
            raise SchemaMismatch(f"Token table has no '{col}' column")

    docs = tokens.groupby("doc_id", sort=True)["word"].agg(list)
    if doc_ids is not None:
        docs = docs.reindex(pd.Index(pd.unique(pd.Series(list(doc_ids))), name="doc_id"))
        docs = docs.apply(lambda x: x if isinstance(x, list) else [])

    vec = CountVectorizer(analyzer=CategoryAnalyzer(parse), vocabulary=list(categories))
    X = vec.fit_transform(docs.tolist())

    counts = pd.DataFrame(X.toarray(), index=docs.index, columns=list(categories))
    counts.index.name = "doc_id"
    return counts


def merge_counts(documents: pd.DataFrame, counts: pd.DataFrame) -> pd.DataFrame:
    """Left-join the count matrix onto the document table by doc_id."""
    counts = counts.reset_index()
    check_join_keys(documents, counts)

    overlap = [c for c in counts.columns if c != "doc_id" and c in documents.columns]
    if overlap:
        raise SchemaMismatch(f"Category columns clash with document columns: {overlap}")

    merged = documents.merge(counts, on="doc_id", how="left", validate="m:1")
    cat_cols = [c for c in counts.columns if c != "doc_id"]
    merged[cat_cols] = merged[cat_cols].fillna(0).astype(int)
    return merged
