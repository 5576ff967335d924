"""
03_build_panel.py

Speaker-day sentiment panels for train and test.

For each sample:
  1. Count lexicon matches per (party, speaker, date, category)
  2. Divide by the speaker's token total that day
  3. Attach day_index (1 = first day of the sample) and the two
     impeachment indicators (1998-10-08, 1998-12-19)
  4. Drop Independents; add the numeric republican indicator

Inputs:
  - split/01_tokens_{train,test}.parquet

Outputs (run dir):
  - panel/03_panel_{train,test}.parquet
  - panel/03_calendar_{train,test}.parquet
"""

import sys
from pathlib import Path

import pandas as pd

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from floor_sentiment import config as cfg
from floor_sentiment.lexicons import resolve_lexicon
from floor_sentiment.panel import build_panel, calendar, two_party


def main():
    cfg.PANEL_DIR.mkdir(parents=True, exist_ok=True)
    lexicon = resolve_lexicon(cfg.CONFIG["lexicon"], cfg.NRC_PATH)

    for sample in cfg.get_samples():
        print(f"\n{'='*60}")
        print(f"Sample: {sample}")

        tokens = pd.read_parquet(cfg.SPLIT_DIR / f"01_tokens_{sample}.parquet")
        panel = build_panel(tokens, lexicon, cfg.EVENT_DATES, fill_zeros=cfg.CONFIG["fill_zeros"])
        n_all = len(panel)
        panel = two_party(panel, cfg.CONFIG["parties"])

        cal = calendar(pd.to_datetime(tokens["date"]).min(),
                       pd.to_datetime(tokens["date"]).max(), cfg.EVENT_DATES)

        print(f"  Panel rows: {n_all:,} -> {len(panel):,} after two-party filter")
        print(f"  Speakers: {panel['speaker'].nunique():,}, "
              f"days: {panel['date'].nunique():,} of {len(cal):,} calendar days")
        for col in cfg.EVENT_COLUMNS:
            print(f"  {col}: {int(panel[col].sum()):,} rows")

        panel_path = cfg.PANEL_DIR / f"03_panel_{sample}.parquet"
        cal_path = cfg.PANEL_DIR / f"03_calendar_{sample}.parquet"
        panel.to_parquet(panel_path)
        cal.to_parquet(cal_path)
        print(f"  Saved: {panel_path}")
        print(f"  Saved: {cal_path}")

    print("Done.")


if __name__ == "__main__":
    main()
