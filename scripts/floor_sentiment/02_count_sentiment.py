"""
02_count_sentiment.py

Dictionary sentiment counts at several granularities.

For the training sample, counts lexicon matches and proportions grouped by:
  corpus, party, document, speaker, day, speaker-day  (config.GROUPINGS)
plus the most frequent matched words per category and party.

Inputs:
  - split/01_tokens_train.parquet
  - lexicon named by CONFIG["lexicon"] ("nrc" | "bing" | path)

Outputs (run dir):
  - counts/02_counts_{grouping}.csv
  - counts/02_top_words_party.csv
"""

import sys
from pathlib import Path

import pandas as pd

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from floor_sentiment import config as cfg
from floor_sentiment.lexicons import resolve_lexicon
from floor_sentiment.matching import count_by, top_words


def main():
    cfg.COUNTS_DIR.mkdir(parents=True, exist_ok=True)

    tokens = pd.read_parquet(cfg.SPLIT_DIR / "01_tokens_train.parquet")
    lexicon = resolve_lexicon(cfg.CONFIG["lexicon"], cfg.NRC_PATH)
    print(f"Lexicon '{cfg.CONFIG['lexicon']}': {len(lexicon):,} entries, "
          f"{lexicon['word'].nunique():,} words, {lexicon['category'].nunique()} categories")
    print(f"Training tokens: {len(tokens):,}")

    for name in cfg.GROUPINGS:
        counts = count_by(tokens, lexicon, name)
        out = cfg.COUNTS_DIR / f"02_counts_{name}.csv"
        counts.to_csv(out, index=False, float_format="%.6f")
        print(f"\n  [{name}] {len(counts):,} rows -> {out}")

        if name == "corpus":
            for _, r in counts.iterrows():
                print(f"    {r['category']:<14} n={r['n']:>9,}  prop={r['proportion']:.4f}")
        elif name == "party":
            wide = counts.pivot(index="category", columns="party", values="proportion")
            print(wide.round(4).to_string())

    words = top_words(tokens, lexicon, by=["party"], n=10)
    out = cfg.COUNTS_DIR / "02_top_words_party.csv"
    words.to_csv(out, index=False)
    print(f"\n  Saved: {out}")
    print("Done.")


if __name__ == "__main__":
    main()
