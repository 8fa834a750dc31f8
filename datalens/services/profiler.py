import logging
import math
import re
import warnings
from collections import Counter
from typing import Dict, List, Any, Optional, Sequence, Union

import pandas as pd

from datalens.constants.stat import (
    TYPE_SAMPLE_SIZE,
    TYPE_RATIO_THRESHOLD,
    STRUCTURE_MAX_DEPTH,
    STRUCTURE_MAX_KEYS,
    SAMPLE_VALUES_LIMIT,
    TOP_WORDS_LIMIT,
)
from datalens.exceptions import UnsupportedFileTypeError
from datalens.models.profile import (
    AnalysisError,
    AnalysisResult,
    ColumnProfile,
    JSONProfile,
    StructureNode,
    TabularProfile,
    TextProfile,
    WordCount,
)

logger = logging.getLogger(__name__)

NO_DATA_MESSAGE = "No data to analyze"
DEPTH_PLACEHOLDER = "..."

_NUMBER_RE = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?\s*$")
_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
_NON_ALNUM_RE = re.compile(r"[\W_]+")


def to_number(value: Any) -> Optional[float]:
    """Parse a cell as a finite decimal number, None when it is not one"""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str) and _NUMBER_RE.match(value):
        number = float(value)
    else:
        return None
    return number if math.isfinite(number) else None


def is_date(value: Any) -> bool:
    """True when the value parses to a valid point in time"""
    if value is None or isinstance(value, bool):
        return False
    text = value if isinstance(value, str) else str(value)
    # relative keywords ("now", "today") and bare month names are not calendar dates
    if not any(ch.isdigit() for ch in text):
        return False
    try:
        with warnings.catch_warnings():
            # pandas warns about inferred formats and dayfirst on scalars
            warnings.simplefilter("ignore")
            parsed = pd.to_datetime(text, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return False
    return not pd.isna(parsed)


def infer_column_type(
    values: Sequence[Any],
    sample_size: int = TYPE_SAMPLE_SIZE,
    threshold: float = TYPE_RATIO_THRESHOLD,
) -> str:
    """
    Infer the type of a column from its leading values.

    Numeric and date matches are counted independently; the number check wins
    so that year-like integers ("2024") stay numbers.
    """
    if len(values) == 0:
        return "unknown"

    sample = list(values[:sample_size])
    number_count = sum(1 for value in sample if to_number(value) is not None)
    date_count = sum(1 for value in sample if is_date(value))

    number_ratio = number_count / len(sample)
    date_ratio = date_count / len(sample)

    if number_ratio > threshold:
        return "number"
    if date_ratio > threshold:
        return "date"
    return "string"


def _is_present(value: Any) -> bool:
    return value is not None and value != ""


def profile_column(
    values: List[Any],
    total_rows: int,
    sample_limit: int = SAMPLE_VALUES_LIMIT,
    type_sample_size: int = TYPE_SAMPLE_SIZE,
) -> ColumnProfile:
    """Summarize one column given all of its cells in row order"""
    present = [value for value in values if _is_present(value)]

    column = ColumnProfile(
        type=infer_column_type(present, sample_size=type_sample_size),
        null_count=total_rows - len(present),
        unique_count=len({str(value) for value in present}),
        sample_values=present[:sample_limit],
    )

    if column.type == "number":
        numbers = [n for n in (to_number(value) for value in present) if n is not None]
        if numbers:
            column.min = min(numbers)
            column.max = max(numbers)
            column.mean = sum(numbers) / len(numbers)

    return column


def analyze_tabular(
    rows: Sequence[Dict[str, Any]],
    sample_limit: int = SAMPLE_VALUES_LIMIT,
    type_sample_size: int = TYPE_SAMPLE_SIZE,
) -> Union[TabularProfile, AnalysisError]:
    """
    Profile rows of column -> cell mappings.

    The column set is taken from the first row. Cells missing from later rows
    count as nulls; keys that only appear in later rows are not profiled.
    """
    if not rows:
        logger.warning("Tabular analysis requested with no rows")
        return AnalysisError(error=NO_DATA_MESSAGE)

    columns = list(rows[0].keys())
    column_stats = {
        column: profile_column(
            [row.get(column) for row in rows],
            total_rows=len(rows),
            sample_limit=sample_limit,
            type_sample_size=type_sample_size,
        )
        for column in columns
    }

    return TabularProfile(
        row_count=len(rows),
        column_count=len(columns),
        columns=column_stats,
    )


def _primitive_type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    return type(value).__name__.lower()


def build_structure(
    value: Any,
    depth: int = 0,
    max_depth: int = STRUCTURE_MAX_DEPTH,
    max_keys: int = STRUCTURE_MAX_KEYS,
) -> StructureNode:
    """
    Describe the shape of a parsed JSON value.

    Arrays are represented by their length and the shape of their first
    element only. Objects keep their first ``max_keys`` keys. Anything deeper
    than ``max_depth`` collapses to ``"..."``.
    """
    if depth > max_depth:
        return DEPTH_PLACEHOLDER

    if isinstance(value, (list, tuple)):
        return {
            "type": "array",
            "length": len(value),
            "sample": build_structure(value[0], depth + 1, max_depth, max_keys) if value else None,
        }

    if isinstance(value, dict):
        structure = {}
        for key in list(value.keys())[:max_keys]:
            structure[key] = build_structure(value[key], depth + 1, max_depth, max_keys)
        return structure

    return _primitive_type_name(value)


def analyze_json(data: Any) -> JSONProfile:
    is_array = isinstance(data, (list, tuple))
    return JSONProfile(
        type="array" if is_array else "object",
        item_count=len(data) if is_array else 1,
        structure=build_structure(data),
    )


def get_word_frequency(words: Sequence[str]) -> List[WordCount]:
    """
    Rank cleaned words by occurrence count.

    Words are lower-cased and stripped of non-alphanumerics; tokens of three
    characters or fewer are dropped. Ties keep first-occurrence order.
    """
    frequency = Counter()
    for word in words:
        clean_word = _NON_ALNUM_RE.sub("", word.lower())
        if len(clean_word) > 3:
            frequency[clean_word] += 1

    # Counter keeps insertion order and sorted() is stable
    ranked = sorted(frequency.items(), key=lambda item: item[1], reverse=True)
    return [WordCount(word=word, count=count) for word, count in ranked]


def analyze_text(content: str, top_n: int = TOP_WORDS_LIMIT) -> TextProfile:
    words = content.split()
    sentences = [s for s in _SENTENCE_SPLIT_RE.split(content) if s.strip()]

    return TextProfile(
        character_count=len(content),
        word_count=len(words),
        sentence_count=len(sentences),
        avg_words_per_sentence=len(words) / len(sentences) if sentences else 0,
        top_words=get_word_frequency(words)[:top_n],
    )


def analyze_data(data: Any, file_type: str) -> AnalysisResult:
    """
    Profile decoded content according to its file type.

    ``csv`` expects a list of rows, ``json`` a parsed tree and ``text`` either
    the raw string or the ``{"content": ...}`` mapping produced by the text
    decoder.
    """
    if file_type == "csv":
        summary = analyze_tabular(data)
    elif file_type == "json":
        summary = analyze_json(data)
    elif file_type == "text":
        content = data["content"] if isinstance(data, dict) else data
        summary = analyze_text(content)
    else:
        raise UnsupportedFileTypeError(f"Unsupported analysis type: {file_type}")

    return AnalysisResult(type=file_type, summary=summary, insights=[])
