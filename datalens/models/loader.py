from pydantic import BaseModel
from typing import Dict, List, Any, Optional, Union
from datalens.models.profile import AnalysisResult


class DatasetAnalysis(BaseModel):
    file_type: str
    file_path: str
    original_name: str
    size: int
    record_count: int
    metadata: Dict[str, Any]
    analysis: AnalysisResult
    ai_summary: Optional[str] = None


class DatasetSummaryResponse(BaseModel):
    dataset_id: Optional[str] = None
    file_type: str
    original_name: str
    size: int
    record_count: int
    metadata: Dict[str, Any]
    analysis: AnalysisResult
    ai_summary: Optional[str] = None


class TabularAnalysisRequest(BaseModel):
    rows: List[Dict[str, Optional[Union[str, int, float, bool]]]]


class JSONAnalysisRequest(BaseModel):
    data: Any


class TextAnalysisRequest(BaseModel):
    content: str


class PreprocessingStep(BaseModel):
    type: str
    parameters: Dict[str, Any] = {}


class PreprocessRequest(BaseModel):
    steps: List[PreprocessingStep]


class DatasetUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    is_public: Optional[bool] = None


class DatasetListResponse(BaseModel):
    datasets: List[Dict[str, Any]]
    page: int
    limit: int
    total: int
    pages: int


class DatasetStatsResponse(BaseModel):
    total_datasets: int
    total_size: int
    type_stats: Dict[str, int]
