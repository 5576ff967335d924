"""
04_fit_mixed_models.py

Impeachment mixed models, per category and joint.

For each sample (train = main estimates, test = replication):
  (1) one model per sentiment category
        proportion ~ party * impeachment_1 + party * impeachment_2
        + (1 | speaker) + (1 + republican | day_index)
  (2) joint "all sentiment" model over the configured categories,
        + (1 + impeachment_1 + impeachment_2 | category)
  (3) two-way FE check: rep × event | speaker + day_index, cluster speaker

Predictions are for an average new speaker of each party on every day of
the sample's calendar.

Inputs:
  - panel/03_panel_{sample}.parquet
  - panel/03_calendar_{sample}.parquet

Outputs (run dir):
  - models/04_predictions_{sample}.parquet
  - models/04_fixed_effects_{sample}.csv
  - models/04_variance_components_{sample}.csv
  - models/04_fe_check_{sample}.csv
"""

import sys
from pathlib import Path

import pandas as pd

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from floor_sentiment import config as cfg
from floor_sentiment.fixed_effects import fit_event_did
from floor_sentiment.mixed_models import fit_by_category, fit_mixed_model, prediction_grid


def summarize(fit, label, rows_fe, rows_vc):
    fe = fit.fixed_effects().reset_index().rename(columns={"index": "term"})
    fe["model"] = label
    rows_fe.append(fe)

    vc = fit.variance_components()
    vc["model"] = label
    vc["singular"] = fit.singular
    rows_vc.append(vc)

    def stars(p):
        if p < 0.01: return "***"
        if p < 0.05: return "**"
        if p < 0.10: return "*"
        return ""

    for _, r in fe.iterrows():
        if "impeachment" in r["term"]:
            print(f"      {r['term']:<34} {r['coef']:>9.5f}{stars(r['pval']):3s} (SE={r['se']:.5f})")


def main():
    cfg.MODEL_DIR.mkdir(parents=True, exist_ok=True)
    categories = cfg.CONFIG["categories"]
    parties = cfg.CONFIG["parties"]
    speaker = cfg.CONFIG["placeholder_speaker"]
    reml = cfg.CONFIG["reml"]

    for sample in cfg.get_samples():
        print(f"\n{'='*60}")
        print(f"Sample: {sample}")

        panel = pd.read_parquet(cfg.PANEL_DIR / f"03_panel_{sample}.parquet")
        cal = pd.read_parquet(cfg.PANEL_DIR / f"03_calendar_{sample}.parquet")
        print(f"  {len(panel):,} panel rows, {panel['speaker'].nunique():,} speakers")

        preds, rows_fe, rows_vc, rows_did = [], [], [], []

        # ── 1. Per-category models ───────────────────────────────
        print("\n  Per-category models:")
        fits = fit_by_category(panel, categories, reml=reml)
        for cat, fit in fits.items():
            summarize(fit, cat, rows_fe, rows_vc)

            grid = prediction_grid(cal, parties, speaker=speaker)
            grid["category"] = cat
            grid["model"] = "category"
            grid["predicted"] = fit.predict(grid)
            preds.append(grid)

            rows_did.append(fit_event_did(panel, category=cat))

        # ── 2. Joint model ───────────────────────────────────────
        print("\n  Joint model:")
        joint_panel = panel[panel["category"].isin(categories)]
        fit = fit_mixed_model(joint_panel, joint=True, reml=reml)
        summarize(fit, "all", rows_fe, rows_vc)

        grid = prediction_grid(cal, parties, categories=categories, speaker=speaker)
        grid["model"] = "joint"
        grid["predicted"] = fit.predict(grid)
        preds.append(grid)

        # ── 3. Save ──────────────────────────────────────────────
        outputs = [
            (pd.concat(preds, ignore_index=True), f"04_predictions_{sample}.parquet"),
            (pd.concat(rows_fe, ignore_index=True), f"04_fixed_effects_{sample}.csv"),
            (pd.concat(rows_vc, ignore_index=True), f"04_variance_components_{sample}.csv"),
            (pd.concat(rows_did, ignore_index=True), f"04_fe_check_{sample}.csv"),
        ]
        for df, name in outputs:
            out = cfg.MODEL_DIR / name
            if out.suffix == ".parquet":
                df.to_parquet(out)
            else:
                df.to_csv(out, index=False, float_format="%.6f")
            print(f"  Saved: {out}")

    print("Done.")


if __name__ == "__main__":
    main()
