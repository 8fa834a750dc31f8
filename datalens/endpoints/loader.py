import logging
from typing import Optional

from fastapi import APIRouter, UploadFile, File, HTTPException, Form
from datalens.services.loader import analyze_file, remove_stored_file
from datalens.services.profiler import analyze_data
from datalens.services.storage import create_dataset_record
from datalens.models.loader import (
    DatasetSummaryResponse,
    JSONAnalysisRequest,
    TabularAnalysisRequest,
    TextAnalysisRequest,
)
from datalens.models.profile import AnalysisResult
from datalens.exceptions import DatalensError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Data Loader"])


def _split_tags(tags: Optional[str]):
    return [tag.strip() for tag in tags.split(",") if tag.strip()] if tags else []


@router.post("/load", response_model=DatasetSummaryResponse)
async def load_dataset(
    uid: str = Form(...),
    file: UploadFile = File(...),
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    tags: Optional[str] = Form(None),
    summarize: bool = Form(False),
):
    """
    Upload a CSV, JSON or text file, profile it and store the dataset record
    """
    if not file.filename:
        raise HTTPException(status_code=400, detail="Please upload a file")

    result = None
    try:
        content = await file.read()
        result = analyze_file(content, file.filename, summarize=summarize)
        record = create_dataset_record(
            uid=uid,
            result=result,
            name=name,
            description=description,
            tags=_split_tags(tags),
        )
    except DatalensError:
        raise
    except Exception as e:
        logger.exception("Error processing upload %s", file.filename)
        # no record points at the stored file
        if result is not None:
            remove_stored_file(result.file_path)
        raise HTTPException(status_code=500, detail=f"Error processing file: {str(e)}")

    logger.info("Dataset %s uploaded by user %s", record["dataset_id"], uid)
    return DatasetSummaryResponse(
        dataset_id=record["dataset_id"],
        file_type=result.file_type,
        original_name=result.original_name,
        size=result.size,
        record_count=result.record_count,
        metadata=result.metadata,
        analysis=result.analysis,
        ai_summary=result.ai_summary,
    )


# Stateless profiling of content the caller already decoded

@router.post("/analyze/csv", response_model=AnalysisResult)
def analyze_rows(request: TabularAnalysisRequest):
    return analyze_data(request.rows, "csv")


@router.post("/analyze/json", response_model=AnalysisResult)
def analyze_tree(request: JSONAnalysisRequest):
    return analyze_data(request.data, "json")


@router.post("/analyze/text", response_model=AnalysisResult)
def analyze_content(request: TextAnalysisRequest):
    return analyze_data(request.content, "text")
