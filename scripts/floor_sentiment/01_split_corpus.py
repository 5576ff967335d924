"""
01_split_corpus.py

Load the floor-speech snapshots and split documents.

The test split is a replication sample: every later stage runs on both
samples independently, each with its own calendar.

Inputs:
  - data/intermediate/house_105_tokens.parquet     (doc_id, word, speaker, party, district, state, date)
  - data/intermediate/house_105_documents.parquet  (doc_id, text, date, speaker, party, ...)

Outputs (run dir):
  - split/01_tokens_{train,test}.parquet
  - split/01_documents_{train,test}.parquet
"""

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from floor_sentiment import config as cfg
from floor_sentiment.corpus import load_corpus, split_corpus


def main():
    cfg.SPLIT_DIR.mkdir(parents=True, exist_ok=True)
    cfg.save_config()

    print("Loading corpus ...")
    tokens, documents = load_corpus(cfg.TOKENS_PATH, cfg.DOCUMENTS_PATH)
    print(f"  Date range: {tokens['date'].min().date()} - {tokens['date'].max().date()}")
    print(f"  Speakers:   {tokens['speaker'].nunique():,}")
    print("\n  Party value counts (documents):")
    print(documents["party"].value_counts(dropna=False).to_string())

    frac, seed = cfg.CONFIG["test_fraction"], cfg.CONFIG["seed"]
    print(f"\nSplitting documents (test fraction={frac}, seed={seed}) ...")
    samples = split_corpus(tokens, documents, frac, seed)

    for sample, (tok, docs) in samples.items():
        tok_path = cfg.SPLIT_DIR / f"01_tokens_{sample}.parquet"
        doc_path = cfg.SPLIT_DIR / f"01_documents_{sample}.parquet"
        tok.to_parquet(tok_path)
        docs.to_parquet(doc_path)
        print(f"  Saved: {tok_path}")
        print(f"  Saved: {doc_path}")

    print("Done.")


if __name__ == "__main__":
    main()
