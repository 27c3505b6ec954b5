from __future__ import annotations

import pandas as pd

from mrp.data.quality import filter_table, missing_counts


def test_duplicate_rows_removed_first_kept():
    df = pd.DataFrame({"id": [1, 1, 2], "name": ["A", "A", "B"]})
    out, report = filter_table(df, name="toy")

    assert out.values.tolist() == [[1, "A"], [2, "B"]]
    assert report.n_duplicates_removed == 1
    assert report.n_rows_in == 3
    assert report.n_rows_out == 2


def test_rows_with_any_missing_cell_are_dropped():
    df = pd.DataFrame({"a": [1.0, None, 3.0], "b": ["x", "y", None]})
    out, report = filter_table(df)

    assert out.values.tolist() == [[1.0, "x"]]
    assert report.missing_by_column == {"a": 1, "b": 1}
    assert report.n_rows_with_missing == 2


def test_post_conditions_hold():
    df = pd.DataFrame(
        {
            "k": [3, 1, 3, 2, None, 1],
            "v": ["c", "a", "c", "b", "z", "a"],
        }
    )
    out, _ = filter_table(df)

    assert int(out.isna().sum().sum()) == 0
    assert not out.duplicated().any()
    assert len(out) <= len(df)
    # first-seen order preserved
    assert out["v"].tolist() == ["c", "a", "b"]
    assert list(out.index) == list(range(len(out)))


def test_nullable_ints_are_narrowed_after_filtering():
    df = pd.DataFrame({"MovieID": pd.array([1, None, 3], dtype="Int64")})
    out, _ = filter_table(df)
    assert out["MovieID"].dtype == "int64"


def test_report_logs_counts(capsys):
    df = pd.DataFrame({"id": [1, 1]})
    filter_table(df, name="ratings")
    out = capsys.readouterr().out
    assert "ratings" in out
    assert "removed 1 duplicate rows" in out


def test_missing_counts_zero_for_clean_frame():
    assert missing_counts(pd.DataFrame({"a": [1], "b": ["x"]})) == {"a": 0, "b": 0}


def test_report_is_json_ready():
    _, report = filter_table(pd.DataFrame({"a": [1]}), name="t")
    d = report.to_dict()
    assert d["name"] == "t"
    assert d["n_rows_out"] == 1
