"""
Corpus loading and the train/test document split.

The corpus arrives as two snapshots prepared upstream:
  - token table    : one row per token per document (long format)
  - document table : one row per document with the raw text

Both are keyed by doc_id.  The split is drawn over document ids so that
all tokens of a document land on the same side.
"""

from pathlib import Path

import pandas as pd
from pandas.api import types as ptypes
from sklearn.model_selection import train_test_split

from floor_sentiment.config import DOCUMENT_COLUMNS, TOKEN_COLUMNS
from floor_sentiment.errors import InvalidParameter, LoadError, SchemaMismatch

JOIN_KEY = "doc_id"


def _read_snapshot(path: Path) -> pd.DataFrame:
    suffix = path.suffix.lower()
    if suffix == ".parquet":
        return pd.read_parquet(path)
    if suffix in (".pkl", ".pickle"):
        return pd.read_pickle(path)
    raise LoadError(f"Unsupported snapshot format: {path}")


def load_table(path, required_columns) -> pd.DataFrame:
    """
    Read one serialized table and check its column set.

    Raises LoadError when the file is missing, unreadable, or lacks any
    of `required_columns`.  Extra columns are kept.
    """
    path = Path(path)
    if not path.exists():
        raise LoadError(f"Snapshot not found: {path}")

    try:
        df = _read_snapshot(path)
    except LoadError:
        raise
    except Exception as e:
        raise LoadError(f"Could not read {path}: {e}") from e

    if not isinstance(df, pd.DataFrame):
        raise LoadError(f"{path} does not hold a table (got {type(df).__name__})")

    missing = [c for c in required_columns if c not in df.columns]
    if missing:
        raise LoadError(f"{path} is missing columns: {missing}")

    if "date" in df.columns:
        try:
            df["date"] = pd.to_datetime(df["date"]).dt.normalize()
        except (ValueError, TypeError) as e:
            raise LoadError(f"{path}: unparseable date column: {e}") from e

    return df


def _key_kind(series: pd.Series) -> str:
    if ptypes.is_integer_dtype(series):
        return "integer"
    if ptypes.is_string_dtype(series) or ptypes.is_object_dtype(series):
        return "string"
    if ptypes.is_float_dtype(series):
        return "float"
    return str(series.dtype)


def check_join_keys(left: pd.DataFrame, right: pd.DataFrame, key: str = JOIN_KEY):
    """Raise SchemaMismatch unless `key` exists in both tables with compatible types."""
    for name, df in (("left", left), ("right", right)):
        if key not in df.columns:
            raise SchemaMismatch(f"Join key '{key}' absent from {name} table")

    lk, rk = _key_kind(left[key]), _key_kind(right[key])
    if lk != rk:
        raise SchemaMismatch(
            f"Join key '{key}' has incompatible types: {left[key].dtype} vs {right[key].dtype}"
        )


def load_corpus(tokens_path, documents_path):
    """Load the token and document snapshots and verify they join on doc_id."""
    tokens = load_table(tokens_path, TOKEN_COLUMNS)
    documents = load_table(documents_path, DOCUMENT_COLUMNS)
    check_join_keys(tokens, documents)

    print(f"  Tokens:    {len(tokens):,} rows, {tokens[JOIN_KEY].nunique():,} documents")
    print(f"  Documents: {len(documents):,} rows")
    return tokens, documents


def split_documents(doc_ids, fraction: float, seed: int):
    """
    Partition document ids into (train, test) sets.

    The test set holds round(fraction * N) ids drawn uniformly without
    replacement.  Ids are de-duplicated and sorted before sampling, so the
    draw depends only on the id set and the seed, not on input order.
    """
    if not 0 < fraction < 1:
        raise InvalidParameter(f"Split fraction must lie in (0, 1), got {fraction}")

    ids = sorted(pd.Series(list(doc_ids)).dropna().unique().tolist())
    n_test = round(fraction * len(ids))

    # train_test_split rejects empty sides
    if n_test == 0:
        return set(ids), set()
    if n_test == len(ids):
        return set(), set(ids)

    train, test = train_test_split(ids, test_size=n_test, random_state=seed, shuffle=True)
    return set(train), set(test)


def split_corpus(tokens: pd.DataFrame, documents: pd.DataFrame, fraction: float, seed: int):
    """Apply split_documents to both tables. Returns {sample: (tokens, documents)}."""
    check_join_keys(tokens, documents)
    train_ids, test_ids = split_documents(documents[JOIN_KEY], fraction, seed)

    out = {}
    for sample, ids in (("train", train_ids), ("test", test_ids)):
        out[sample] = (
            tokens[tokens[JOIN_KEY].isin(ids)].reset_index(drop=True),
            documents[documents[JOIN_KEY].isin(ids)].reset_index(drop=True),
        )
        print(f"  {sample}: {len(ids):,} documents, {len(out[sample][0]):,} tokens")
    return out
