"""
05_score_vader.py

VADER sentence scores vs. dictionary proportions.

For each sample:
  1. Score every document (mean sentence compound)
  2. Average per (party, date) and per (party, speaker, date)
  3. Correlate party-day VADER means with party-day dictionary
     proportions of each configured category

Inputs:
  - split/01_documents_{sample}.parquet
  - split/01_tokens_{sample}.parquet

Outputs (run dir):
  - vader/05_document_scores_{sample}.parquet
  - vader/05_party_day_{sample}.csv
  - vader/05_speaker_day_{sample}.csv
  - vader/05_comparison_{sample}.csv
"""

import sys
from pathlib import Path

import pandas as pd

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from floor_sentiment import config as cfg
from floor_sentiment.lexicons import resolve_lexicon
from floor_sentiment.matching import count_sentiment
from floor_sentiment.sentence_scores import aggregate_scores, compare_measures, score_documents


def main():
    cfg.VADER_DIR.mkdir(parents=True, exist_ok=True)
    lexicon = resolve_lexicon(cfg.CONFIG["lexicon"], cfg.NRC_PATH)

    for sample in cfg.get_samples():
        print(f"\n{'='*60}")
        print(f"Sample: {sample}")

        documents = pd.read_parquet(cfg.SPLIT_DIR / f"01_documents_{sample}.parquet")
        tokens = pd.read_parquet(cfg.SPLIT_DIR / f"01_tokens_{sample}.parquet")

        scores = score_documents(documents)
        print(f"  Scored {len(scores):,} documents, "
              f"{int(scores['n_sentences'].sum()):,} sentences, "
              f"mean={scores['vader'].mean():.4f}")

        party_day = aggregate_scores(scores, documents, by=("party", "date"))
        speaker_day = aggregate_scores(scores, documents, by=("party", "speaker", "date"))

        dictionary = count_sentiment(tokens, lexicon, by=["party", "date"])
        summaries = []
        for cat in cfg.CONFIG["categories"]:
            _, summary = compare_measures(dictionary, party_day, cat)
            summaries.append(summary)
            print(f"    {cat:<12} r={summary['r']:>7.3f}  (p={summary['pval']:.4f}, n={summary['n']})")

        outputs = [
            (scores, f"05_document_scores_{sample}.parquet"),
            (party_day, f"05_party_day_{sample}.csv"),
            (speaker_day, f"05_speaker_day_{sample}.csv"),
            (pd.DataFrame(summaries), f"05_comparison_{sample}.csv"),
        ]
        for df, name in outputs:
            out = cfg.VADER_DIR / name
            if out.suffix == ".parquet":
                df.to_parquet(out)
            else:
                df.to_csv(out, index=False, float_format="%.6f")
            print(f"  Saved: {out}")

    print("Done.")


if __name__ == "__main__":
    main()
