"""
06_count_mfd.py

Moral Foundations Dictionary counts per document.

Loads the LIWC-format MFD, counts category matches for every document of
the full corpus, and merges the counts back onto the document table.

Inputs:
  - data/raw/lexicons/mfd2.0.dic
  - data/intermediate/house_105_tokens.parquet
  - data/intermediate/house_105_documents.parquet

Outputs (run dir):
  - mfd/06_documents_mfd.parquet
  - mfd/06_mfd_by_party.csv
"""

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from floor_sentiment import config as cfg
from floor_sentiment.corpus import load_corpus
from floor_sentiment.liwc_counts import count_categories, load_liwc_dictionary, merge_counts


def main():
    cfg.MFD_DIR.mkdir(parents=True, exist_ok=True)

    print("Loading dictionary ...")
    parse, categories = load_liwc_dictionary(cfg.MFD_PATH)
    print(f"  {len(categories)} categories: {', '.join(categories)}")

    print("Loading corpus ...")
    tokens, documents = load_corpus(cfg.TOKENS_PATH, cfg.DOCUMENTS_PATH)

    counts = count_categories(tokens, parse, categories, doc_ids=documents["doc_id"])
    n_hit = int((counts.sum(axis=1) > 0).sum())
    print(f"  Count matrix: {counts.shape[0]:,} documents x {counts.shape[1]} categories")
    print(f"  Documents with any match: {n_hit:,} ({n_hit / max(len(counts), 1) * 100:.1f}%)")

    merged = merge_counts(documents, counts)
    by_party = merged.groupby("party")[categories].mean()
    print("\n  Mean counts per document by party:")
    print(by_party.round(3).T.to_string())

    out = cfg.MFD_DIR / "06_documents_mfd.parquet"
    merged.to_parquet(out)
    print(f"\n  Saved: {out}")

    out = cfg.MFD_DIR / "06_mfd_by_party.csv"
    by_party.reset_index().to_csv(out, index=False, float_format="%.6f")
    print(f"  Saved: {out}")
    print("Done.")


if __name__ == "__main__":
    main()
