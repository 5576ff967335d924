"""
Settings shared by the floor-speech sentiment stages (01-06).

A run is one combination of lexicon, modelled categories and split.
Outputs land under data/processed/runs/<RUN_NAME>/ with the settings
written next to them as config.json, so two lexicons can be compared
side by side without overwriting each other.

Switching lexicon without editing this file:
  FLOOR_SENTIMENT_CONFIG_OVERRIDE=/path/to/bing.json python 02_count_sentiment.py

  bing.json:
    {"run_name": "bing", "lexicon": "bing", "categories": ["negative", "positive"]}

Keys in the override must already exist in CONFIG; "categories" must be
a subset of what the chosen lexicon provides, which stage 04 checks when
it fits the models.
"""

import json
import os
from pathlib import Path

from floor_sentiment.errors import InvalidParameter

BASE_DIR = Path(os.environ.get("FLOOR_SENTIMENT_DIR", Path(__file__).resolve().parents[2]))

# ── Run name ───────────────────────────────────────────────────────
RUN_NAME = "main"

# ── Pipeline settings ──────────────────────────────────────────────
CONFIG = {
    "run_name": RUN_NAME,
    "test_fraction": 0.2,               # share of documents held out as replication sample
    "seed": 1998,                       # train/test split seed
    "lexicon": "nrc",                   # "nrc" | "bing" | path to a word,category table
    "categories": ["anger", "fear", "negative", "positive", "trust"],
    "reml": True,                       # False = maximum likelihood
    "fill_zeros": False,                # True = explicit zero rows for unmatched speaker-days
    "placeholder_speaker": "new_speaker",
    "parties": ["D", "R"],              # two-level contrast for the regressions
}

# ── Lexicon / category overrides ───────────────────────────────────
def read_override(path, settings):
    """Merge a JSON override into a copy of `settings`; unknown keys are rejected."""
    with open(path) as f:
        changes = json.load(f)

    unknown = sorted(set(changes) - set(settings))
    if unknown:
        raise InvalidParameter(f"Override {path} sets unknown keys: {unknown}")
    if "categories" in changes and not changes["categories"]:
        raise InvalidParameter(f"Override {path} leaves no categories to model")

    merged = dict(settings)
    merged.update(changes)
    return merged


_override_path = os.environ.get("FLOOR_SENTIMENT_CONFIG_OVERRIDE")
if _override_path:
    CONFIG = read_override(_override_path, CONFIG)
    RUN_NAME = CONFIG["run_name"]
    print(f"  [config] run={RUN_NAME}: lexicon={CONFIG['lexicon']}, "
          f"categories={', '.join(CONFIG['categories'])}")

# ── Event dates ────────────────────────────────────────────────────
# 1998-10-08: House votes to open the impeachment inquiry
# 1998-12-19: House adopts the articles of impeachment
EVENT_DATES = ("1998-10-08", "1998-12-19")
EVENT_COLUMNS = ("impeachment_1", "impeachment_2")

# ── Grouping presets for the lexicon matcher ──────────────────────
GROUPINGS = {
    "corpus":      [],
    "party":       ["party"],
    "document":    ["doc_id"],
    "speaker":     ["speaker"],
    "day":         ["date"],
    "speaker_day": ["party", "speaker", "date"],
}

# ── Expected snapshot columns ─────────────────────────────────────
TOKEN_COLUMNS = ["doc_id", "word", "speaker", "party", "district", "state", "date"]
DOCUMENT_COLUMNS = ["doc_id", "text", "date", "speaker", "party"]

# ── Shared input paths (fixed, independent of run) ────────────────
DATA_DIR       = BASE_DIR / "data"
TOKENS_PATH    = DATA_DIR / "intermediate" / "house_105_tokens.parquet"
DOCUMENTS_PATH = DATA_DIR / "intermediate" / "house_105_documents.parquet"
NRC_PATH       = DATA_DIR / "raw" / "lexicons" / "NRC-Emotion-Lexicon-Wordlevel-v0.92.txt"
MFD_PATH       = DATA_DIR / "raw" / "lexicons" / "mfd2.0.dic"

# ── Run-specific output paths ─────────────────────────────────────
RUN_DIR    = DATA_DIR / "processed" / "runs" / RUN_NAME
SPLIT_DIR  = RUN_DIR / "split"
COUNTS_DIR = RUN_DIR / "counts"
PANEL_DIR  = RUN_DIR / "panel"
MODEL_DIR  = RUN_DIR / "models"
VADER_DIR  = RUN_DIR / "vader"
MFD_DIR    = RUN_DIR / "mfd"


def save_config():
    """Save the current config alongside run outputs."""
    RUN_DIR.mkdir(parents=True, exist_ok=True)
    with open(RUN_DIR / "config.json", "w") as f:
        json.dump(CONFIG, f, indent=2)
    print(f"  Config saved -> {RUN_DIR / 'config.json'}")


def get_samples():
    """Return the split samples every per-sample stage iterates over."""
    return ["train", "test"]
