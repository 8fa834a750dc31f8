from pydantic import BaseModel, model_serializer
from typing import Dict, List, Any, Optional, Union

# Scalars and the depth placeholder are plain strings, objects and arrays are dicts.
StructureNode = Union[str, Dict[str, Any]]


class ColumnProfile(BaseModel):
    type: str
    null_count: int
    unique_count: int
    sample_values: List[Any]
    min: Optional[float] = None
    max: Optional[float] = None
    mean: Optional[float] = None

    @model_serializer(mode="wrap")
    def _omit_missing_stats(self, handler):
        data = handler(self)
        for key in ("min", "max", "mean"):
            if data.get(key) is None:
                data.pop(key, None)
        return data


class TabularProfile(BaseModel):
    row_count: int
    column_count: int
    columns: Dict[str, ColumnProfile]


class WordCount(BaseModel):
    word: str
    count: int


class TextProfile(BaseModel):
    character_count: int
    word_count: int
    sentence_count: int
    avg_words_per_sentence: float
    top_words: List[WordCount]


class JSONProfile(BaseModel):
    type: str
    item_count: int
    structure: StructureNode


class AnalysisError(BaseModel):
    """Structured result for input the profiler cannot summarize"""
    error: str


class AnalysisResult(BaseModel):
    type: str
    summary: Union[TabularProfile, JSONProfile, TextProfile, AnalysisError]
    insights: List[str] = []
