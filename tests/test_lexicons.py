import pandas as pd
import pytest

from floor_sentiment.errors import LoadError
from floor_sentiment.lexicons import (
    bing_lexicon, lexicon_from_mapping, load_lexicon, load_nrc_lexicon, resolve_lexicon,
)


def test_from_mapping_expands_multi_category():
    lex = lexicon_from_mapping({"fear": ["fear", "negative"], "good": "positive"})
    assert list(lex.columns) == ["word", "category"]
    assert len(lex) == 3
    assert set(lex.loc[lex["word"] == "fear", "category"]) == {"fear", "negative"}


def test_nrc_keeps_flagged_associations(tmp_path):
    path = tmp_path / "nrc.txt"
    path.write_text(
        "abandon\tfear\t1\n"
        "abandon\tjoy\t0\n"
        "abandon\tnegative\t1\n"
        "null\tpositive\t1\n"
    )
    lex = load_nrc_lexicon(path)
    assert set(map(tuple, lex.values)) == {
        ("abandon", "fear"), ("abandon", "negative"), ("null", "positive"),
    }


def test_nrc_bad_flags(tmp_path):
    path = tmp_path / "nrc.txt"
    path.write_text("abandon\tfear\tyes\n")
    with pytest.raises(LoadError):
        load_nrc_lexicon(path)


def test_table_lexicon_csv(tmp_path):
    path = tmp_path / "lex.csv"
    pd.DataFrame({"word": ["good", "bad", "bad"],
                  "category": ["positive", "negative", "negative"],
                  "source": ["x", "y", "y"]}).to_csv(path, index=False)
    lex = load_lexicon(path)
    assert len(lex) == 2
    assert list(lex.columns) == ["word", "category"]


def test_table_lexicon_missing_column(tmp_path):
    path = tmp_path / "lex.csv"
    pd.DataFrame({"word": ["good"]}).to_csv(path, index=False)
    with pytest.raises(LoadError):
        load_lexicon(path)


def test_missing_files(tmp_path):
    with pytest.raises(LoadError):
        load_lexicon(tmp_path / "none.csv")
    with pytest.raises(LoadError):
        load_nrc_lexicon(tmp_path / "none.txt")
    with pytest.raises(LoadError):
        resolve_lexicon("nrc", None)


def test_bing_from_nltk():
    nltk = pytest.importorskip("nltk")
    try:
        nltk.data.find("corpora/opinion_lexicon")
    except LookupError:
        pytest.skip("NLTK opinion_lexicon corpus not downloaded")

    lex = bing_lexicon()
    assert set(lex["category"]) == {"positive", "negative"}
    assert "good" in set(lex.loc[lex["category"] == "positive", "word"])
