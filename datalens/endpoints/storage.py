import os
from typing import Optional

from fastapi import APIRouter, Query
from fastapi.responses import FileResponse

from datalens.exceptions import DatasetNotFoundError
from datalens.models.loader import (
    DatasetListResponse,
    DatasetStatsResponse,
    DatasetUpdate,
    PreprocessRequest,
)
from datalens.services.storage import (
    add_preprocessing_steps,
    delete_dataset,
    get_dataset,
    get_dataset_stats,
    list_user_datasets,
    record_download,
    total_pages,
    update_dataset,
)

router = APIRouter(prefix="/datasets", tags=["Storage"])


# ---------------- GET ROUTES ----------------

@router.get("/user/{uid}", response_model=DatasetListResponse)
def get_user_datasets(
    uid: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    type: Optional[str] = None,
    status: Optional[str] = None,
    tags: Optional[str] = None,
):
    tag_list = [tag.strip() for tag in tags.split(",") if tag.strip()] if tags else None
    datasets, total = list_user_datasets(uid, page=page, limit=limit, type=type, status=status, tags=tag_list)
    return DatasetListResponse(
        datasets=datasets,
        page=page,
        limit=limit,
        total=total,
        pages=total_pages(total, limit),
    )


@router.get("/user/{uid}/stats", response_model=DatasetStatsResponse)
def get_user_dataset_stats(uid: str):
    return get_dataset_stats(uid)


@router.get("/{dataset_id}")
def get_single_dataset(dataset_id: str, uid: str = Query(...)):
    return {"dataset": get_dataset(dataset_id, uid)}


@router.get("/{dataset_id}/download")
def download_dataset(dataset_id: str, uid: str = Query(...)):
    dataset = get_dataset(dataset_id, uid)
    if not os.path.exists(dataset["file_path"]):
        raise DatasetNotFoundError("File not found")

    record_download(dataset_id, uid)
    return FileResponse(dataset["file_path"], filename=dataset["original_name"])


# ---------------- PUT / POST / DELETE ROUTES ----------------

@router.put("/{dataset_id}")
def update_single_dataset(dataset_id: str, changes: DatasetUpdate, uid: str = Query(...)):
    return {"dataset": update_dataset(dataset_id, uid, changes.model_dump())}


@router.post("/{dataset_id}/preprocess")
def preprocess_dataset(dataset_id: str, request: PreprocessRequest, uid: str = Query(...)):
    steps = [step.model_dump() for step in request.steps]
    return {
        "dataset": add_preprocessing_steps(dataset_id, uid, steps),
        "message": "Preprocessing steps added",
    }


@router.delete("/{dataset_id}")
def delete_single_dataset(dataset_id: str, uid: str = Query(...)):
    delete_dataset(dataset_id, uid)
    return {"message": "Dataset deleted"}
