"""Tests for datalens.services.profiler."""

import pytest

from datalens.exceptions import UnsupportedFileTypeError
from datalens.models.profile import AnalysisError, TabularProfile
from datalens.services.profiler import (
    analyze_data,
    analyze_json,
    analyze_tabular,
    analyze_text,
    build_structure,
    get_word_frequency,
    infer_column_type,
    is_date,
    to_number,
)


PEOPLE = [
    {"name": "John", "age": "25", "city": "New York"},
    {"name": "Jane", "age": "30", "city": "Los Angeles"},
    {"name": "Bob", "age": "35", "city": "Chicago"},
]


# ── cell parsing ─────────────────────────────────────────────────────

class TestCellParsing:
    @pytest.mark.parametrize("value", ["1", "-2.5", "+3", ".5", "1e3", " 42 ", 7, 2.5])
    def test_numbers(self, value):
        assert to_number(value) is not None

    @pytest.mark.parametrize("value", ["", "abc", "12abc", "1_000", "nan", "inf", "1e999", None, True, 10**400])
    def test_not_numbers(self, value):
        assert to_number(value) is None

    def test_dates(self):
        assert is_date("2023-01-01")
        assert is_date("2024-06-15T10:30:00Z")
        assert is_date("March 5, 2021")

    def test_not_dates(self):
        assert not is_date("hello")
        assert not is_date("now")
        assert not is_date("today")
        assert not is_date("March")
        assert not is_date("")
        assert not is_date(None)


# ── infer_column_type ────────────────────────────────────────────────

class TestInferColumnType:
    def test_numeric(self):
        assert infer_column_type(["1", "2", "3.5", "100"]) == "number"

    def test_string(self):
        assert infer_column_type(["hello", "world", "test"]) == "string"

    def test_empty(self):
        assert infer_column_type([]) == "unknown"

    def test_dates(self):
        assert infer_column_type(["2023-01-01", "2023-12-31", "2024-06-15"]) == "date"

    def test_relative_keywords_are_not_dates(self):
        assert infer_column_type(["now", "today", "now", "today", "now"]) == "string"
        assert infer_column_type(["January", "March", "May", "June"]) == "string"

    def test_year_like_integers_stay_numbers(self):
        assert infer_column_type(["2020", "2021", "2022", "2023"]) == "number"

    def test_ratio_must_exceed_threshold(self):
        # 4 of 5 is exactly 0.8, which is not enough
        assert infer_column_type(["1", "2", "3", "4", "x"]) == "string"
        assert infer_column_type(["1", "2", "3", "4", "5", "x"]) == "number"

    def test_only_leading_sample_is_inspected(self):
        values = ["1"] * 100 + ["word"] * 500
        assert infer_column_type(values) == "number"
        assert infer_column_type(values, sample_size=600) == "string"


# ── analyze_tabular ──────────────────────────────────────────────────

class TestAnalyzeTabular:
    def test_people(self):
        result = analyze_tabular(PEOPLE)

        assert isinstance(result, TabularProfile)
        assert result.row_count == 3
        assert result.column_count == 3
        assert list(result.columns) == ["name", "age", "city"]

        age = result.columns["age"]
        assert age.type == "number"
        assert age.min == 25
        assert age.max == 35
        assert age.mean == 30

        name = result.columns["name"]
        assert name.type == "string"
        assert name.min is None
        assert name.sample_values == ["John", "Jane", "Bob"]

    def test_empty_rows_return_error_result(self):
        result = analyze_tabular([])
        assert isinstance(result, AnalysisError)
        assert result.error == "No data to analyze"

    def test_null_and_unique_counts(self):
        rows = [{"tag": value} for value in ["a", "", None, "b", "a", "A"]]
        column = analyze_tabular(rows).columns["tag"]

        assert column.null_count == 2
        assert column.unique_count == 3
        assert column.sample_values == ["a", "b", "a", "A"]

    def test_unique_count_uses_text_equality(self):
        rows = [{"v": 1}, {"v": 1.0}, {"v": True}, {"v": "1"}, {"v": 1}]
        assert analyze_tabular(rows).columns["v"].unique_count == 3

    def test_oversized_integer_is_not_a_number(self):
        rows = [{"v": 10**400}] + [{"v": str(i)} for i in range(9)]
        column = analyze_tabular(rows).columns["v"]
        assert column.type == "number"
        assert column.min == 0
        assert column.max == 8

    def test_sample_values_capped_at_five(self):
        rows = [{"n": str(i)} for i in range(20)]
        assert analyze_tabular(rows).columns["n"].sample_values == ["0", "1", "2", "3", "4"]

    def test_numeric_stats_skip_unparsable_cells(self):
        rows = [{"v": value} for value in ["10", "20", "abc", "30", "40", "50"]]
        column = analyze_tabular(rows).columns["v"]

        assert column.type == "number"
        assert column.min == 10
        assert column.max == 50
        assert column.mean == 30

    def test_columns_come_from_first_row(self):
        rows = [{"a": "1"}, {"a": "2", "b": "x"}, {"b": "y"}]
        result = analyze_tabular(rows)

        assert list(result.columns) == ["a"]
        assert result.columns["a"].null_count == 1

    def test_missing_stats_are_not_serialized(self):
        dumped = analyze_tabular(PEOPLE).model_dump()
        assert "min" not in dumped["columns"]["city"]
        assert dumped["columns"]["age"]["mean"] == 30

    def test_all_null_column_is_unknown(self):
        rows = [{"x": ""}, {"x": None}]
        column = analyze_tabular(rows).columns["x"]
        assert column.type == "unknown"
        assert column.null_count == 2
        assert column.unique_count == 0

    def test_idempotent(self):
        first = analyze_tabular(PEOPLE).model_dump_json()
        second = analyze_tabular(PEOPLE).model_dump_json()
        assert first == second


# ── build_structure ──────────────────────────────────────────────────

class TestBuildStructure:
    def test_simple_object(self):
        assert build_structure({"name": "John", "age": 25}) == {"name": "string", "age": "number"}

    def test_array(self):
        result = build_structure([{"name": "John"}, {"name": "Jane"}])
        assert result == {"type": "array", "length": 2, "sample": {"name": "string"}}

    def test_empty_array(self):
        assert build_structure([]) == {"type": "array", "length": 0, "sample": None}

    def test_scalars(self):
        assert build_structure(True) == "boolean"
        assert build_structure(None) == "null"
        assert build_structure(1.5) == "number"

    def test_depth_cap(self):
        nested = {"a": {"b": {"c": {"d": {"e": 1}}}}}
        assert build_structure(nested) == {"a": {"b": {"c": {"d": "..."}}}}

    def test_key_cap(self):
        obj = {f"k{i}": i for i in range(12)}
        result = build_structure(obj)
        assert list(result) == [f"k{i}" for i in range(10)]

    def test_configurable_caps(self):
        assert build_structure({"a": {"b": 1}}, max_depth=0) == {"a": "..."}
        assert list(build_structure({"a": 1, "b": 2, "c": 3}, max_keys=2)) == ["a", "b"]

    def test_analyze_json(self):
        profile = analyze_json([{"id": 1}, {"id": 2}, {"id": 3}])
        assert profile.type == "array"
        assert profile.item_count == 3
        assert profile.structure["sample"] == {"id": "number"}

        profile = analyze_json({"id": 1})
        assert profile.type == "object"
        assert profile.item_count == 1


# ── text ─────────────────────────────────────────────────────────────

class TestWordFrequency:
    def test_counts(self):
        words = ["hello", "world", "hello", "test", "world", "hello"]
        result = [(w.word, w.count) for w in get_word_frequency(words)]
        assert result == [("hello", 3), ("world", 2), ("test", 1)]

    def test_short_words_filtered(self):
        result = [(w.word, w.count) for w in get_word_frequency(["a", "an", "the", "hello", "world"])]
        assert result == [("hello", 1), ("world", 1)]

    def test_cleaning(self):
        result = [(w.word, w.count) for w in get_word_frequency(["Data,", "DATA!", "data_", "(ok)"])]
        assert result == [("data", 3)]


class TestAnalyzeText:
    def test_counts(self):
        profile = analyze_text("Hello world. This is great!")
        assert profile.character_count == 27
        assert profile.word_count == 5
        assert profile.sentence_count == 2
        assert profile.avg_words_per_sentence == 2.5
        assert [w.word for w in profile.top_words] == ["hello", "world", "this", "great"]

    def test_empty(self):
        profile = analyze_text("")
        assert profile.word_count == 0
        assert profile.sentence_count == 0
        assert profile.avg_words_per_sentence == 0
        assert profile.top_words == []

    def test_top_words_truncated(self):
        content = " ".join(f"word{i}" for i in range(30))
        assert len(analyze_text(content).top_words) == 10
        assert len(analyze_text(content, top_n=3).top_words) == 3

    def test_punctuation_runs(self):
        assert analyze_text("Wait... what?! Yes.").sentence_count == 3


# ── analyze_data ─────────────────────────────────────────────────────

class TestAnalyzeData:
    def test_dispatch(self):
        assert analyze_data(PEOPLE, "csv").summary.row_count == 3
        assert analyze_data({"a": 1}, "json").summary.structure == {"a": "number"}
        assert analyze_data({"content": "One two three four."}, "text").summary.word_count == 4
        assert analyze_data("Plain string content.", "text").summary.word_count == 3

    def test_empty_csv(self):
        result = analyze_data([], "csv")
        assert result.summary.error == "No data to analyze"
        assert result.insights == []

    def test_unknown_type(self):
        with pytest.raises(UnsupportedFileTypeError):
            analyze_data("x", "xml")
