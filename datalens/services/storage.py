import logging
import math
import os
from datetime import datetime
from typing import Dict, List, Any, Optional, Tuple

from bson import ObjectId
from pymongo import DESCENDING, MongoClient, ReturnDocument

from datalens.constants.stat import MONGO_URI, MONGO_DB
from datalens.exceptions import (
    ConversationNotFoundError,
    DatasetNotFoundError,
    InvalidConversationIdError,
    InvalidDatasetIdError,
)
from datalens.models.loader import DatasetAnalysis

logger = logging.getLogger(__name__)

client = MongoClient(MONGO_URI)
db = client[MONGO_DB]

dataset_collection = db["datasets"]
conversation_collection = db["conversations"]


def serialize_dataset(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Convert ObjectId to string so the record is JSON friendly"""
    doc = dict(doc)
    doc["id"] = str(doc.pop("_id"))
    return doc


def _object_id(value: str, error=InvalidDatasetIdError, label: str = "dataset") -> ObjectId:
    if not ObjectId.is_valid(value):
        raise error(f"Invalid {label} ID: {value}")
    return ObjectId(value)


def _owned_by(dataset_id: str, uid: str) -> Dict[str, Any]:
    return {"_id": _object_id(dataset_id), "uid": uid}


# ---------------- Create ----------------
def create_dataset_record(
    uid: str,
    result: DatasetAnalysis,
    name: Optional[str] = None,
    description: Optional[str] = None,
    tags: Optional[List[str]] = None,
) -> Dict[str, Any]:
    now = datetime.utcnow()
    columns = result.metadata.get("columns") or result.metadata.get("keys") or []
    doc = {
        "uid": uid,
        "name": name or result.original_name,
        "description": description,
        "type": result.file_type,
        "format": os.path.splitext(result.original_name)[1].lower(),
        "size": result.size,
        "record_count": result.record_count,
        "file_path": result.file_path,
        "original_name": result.original_name,
        "metadata": {
            "columns": columns,
            "statistics": result.analysis.model_dump(),
            "ai_summary": result.ai_summary,
        },
        "preprocessing": {"steps": [], "is_processed": False},
        "tags": tags or [],
        "is_public": False,
        "download_count": 0,
        "status": "ready",
        "created_at": now,
        "updated_at": now,
    }

    inserted = dataset_collection.insert_one(doc)
    logger.info("Dataset %s created for user %s", inserted.inserted_id, uid)
    return {"dataset_id": str(inserted.inserted_id)}


# ---------------- Read ----------------
def list_user_datasets(
    uid: str,
    page: int = 1,
    limit: int = 10,
    type: Optional[str] = None,
    status: Optional[str] = None,
    tags: Optional[List[str]] = None,
) -> Tuple[List[Dict[str, Any]], int]:
    query: Dict[str, Any] = {"uid": uid}
    if type:
        query["type"] = type
    if status:
        query["status"] = status
    if tags:
        query["tags"] = {"$in": tags}

    cursor = (
        dataset_collection.find(query)
        .sort("created_at", DESCENDING)
        .skip((page - 1) * limit)
        .limit(limit)
    )
    datasets = [serialize_dataset(doc) for doc in cursor]
    total = dataset_collection.count_documents(query)
    return datasets, total


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


def get_dataset(dataset_id: str, uid: str) -> Dict[str, Any]:
    """Fetch a dataset owned by uid or shared publicly"""
    doc = dataset_collection.find_one({
        "_id": _object_id(dataset_id),
        "$or": [{"uid": uid}, {"is_public": True}],
    })
    if doc is None:
        raise DatasetNotFoundError(f"Dataset {dataset_id} not found")
    return serialize_dataset(doc)


def get_dataset_stats(uid: str) -> Dict[str, Any]:
    total_datasets = dataset_collection.count_documents({"uid": uid})
    size_rows = list(dataset_collection.aggregate([
        {"$match": {"uid": uid}},
        {"$group": {"_id": None, "total_size": {"$sum": "$size"}}},
    ]))
    type_rows = dataset_collection.aggregate([
        {"$match": {"uid": uid}},
        {"$group": {"_id": "$type", "count": {"$sum": 1}}},
    ])
    return {
        "total_datasets": total_datasets,
        "total_size": size_rows[0]["total_size"] if size_rows else 0,
        "type_stats": {row["_id"]: row["count"] for row in type_rows},
    }


# ---------------- Update ----------------
def update_dataset(dataset_id: str, uid: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    changes = {key: value for key, value in fields.items() if value is not None}
    changes["updated_at"] = datetime.utcnow()
    doc = dataset_collection.find_one_and_update(
        _owned_by(dataset_id, uid),
        {"$set": changes},
        return_document=ReturnDocument.AFTER,
    )
    if doc is None:
        raise DatasetNotFoundError(f"Dataset {dataset_id} not found")
    return serialize_dataset(doc)


def add_preprocessing_steps(dataset_id: str, uid: str, steps: List[Dict[str, Any]]) -> Dict[str, Any]:
    now = datetime.utcnow()
    entries = [
        {"type": step["type"], "parameters": step.get("parameters", {}), "applied_at": now}
        for step in steps
    ]
    doc = dataset_collection.find_one_and_update(
        _owned_by(dataset_id, uid),
        {
            "$push": {"preprocessing.steps": {"$each": entries}},
            "$set": {"updated_at": now},
        },
        return_document=ReturnDocument.AFTER,
    )
    if doc is None:
        raise DatasetNotFoundError(f"Dataset {dataset_id} not found")
    return serialize_dataset(doc)


def record_download(dataset_id: str, uid: str) -> Dict[str, Any]:
    """Increment the download counter of a visible dataset and return it"""
    doc = dataset_collection.find_one_and_update(
        {
            "_id": _object_id(dataset_id),
            "$or": [{"uid": uid}, {"is_public": True}],
        },
        {"$inc": {"download_count": 1}, "$set": {"updated_at": datetime.utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    if doc is None:
        raise DatasetNotFoundError(f"Dataset {dataset_id} not found")
    return serialize_dataset(doc)


# ---------------- Delete ----------------
def delete_dataset(dataset_id: str, uid: str) -> None:
    doc = dataset_collection.find_one_and_delete(_owned_by(dataset_id, uid))
    if doc is None:
        raise DatasetNotFoundError(f"Dataset {dataset_id} not found")

    file_path = doc.get("file_path")
    if file_path and os.path.exists(file_path):
        os.remove(file_path)
    logger.info("Dataset %s deleted by user %s", dataset_id, uid)


# ---------------- Conversations ----------------
def _conversation_owned_by(conversation_id: str, uid: str) -> Dict[str, Any]:
    oid = _object_id(conversation_id, InvalidConversationIdError, "conversation")
    return {"_id": oid, "uid": uid}


def create_conversation(
    uid: str,
    title: str,
    settings: Dict[str, Any],
    tags: Optional[List[str]] = None,
) -> Dict[str, Any]:
    now = datetime.utcnow()
    doc = {
        "uid": uid,
        "title": title,
        "messages": [],
        "settings": settings,
        "tags": tags or [],
        "is_active": True,
        "is_shared": False,
        "total_tokens": 0,
        "created_at": now,
        "updated_at": now,
    }
    inserted = conversation_collection.insert_one(doc)
    doc["_id"] = inserted.inserted_id
    logger.info("Conversation %s created for user %s", inserted.inserted_id, uid)
    return serialize_dataset(doc)


def list_user_conversations(uid: str, page: int = 1, limit: int = 10) -> Tuple[List[Dict[str, Any]], int]:
    """Page through a user's conversations without their messages"""
    cursor = (
        conversation_collection.find({"uid": uid}, {"messages": 0})
        .sort("updated_at", DESCENDING)
        .skip((page - 1) * limit)
        .limit(limit)
    )
    conversations = [serialize_dataset(doc) for doc in cursor]
    total = conversation_collection.count_documents({"uid": uid})
    return conversations, total


def get_conversation(conversation_id: str, uid: str) -> Dict[str, Any]:
    doc = conversation_collection.find_one(_conversation_owned_by(conversation_id, uid))
    if doc is None:
        raise ConversationNotFoundError(f"Conversation {conversation_id} not found")
    return serialize_dataset(doc)


def update_conversation(conversation_id: str, uid: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    changes = {key: value for key, value in fields.items() if value is not None}
    now = datetime.utcnow()
    if changes.get("is_shared"):
        changes["shared_at"] = now
    changes["updated_at"] = now
    doc = conversation_collection.find_one_and_update(
        _conversation_owned_by(conversation_id, uid),
        {"$set": changes},
        return_document=ReturnDocument.AFTER,
    )
    if doc is None:
        raise ConversationNotFoundError(f"Conversation {conversation_id} not found")
    return serialize_dataset(doc)


def append_messages(
    conversation_id: str,
    uid: str,
    messages: List[Dict[str, Any]],
    tokens: int = 0,
) -> Dict[str, Any]:
    doc = conversation_collection.find_one_and_update(
        _conversation_owned_by(conversation_id, uid),
        {
            "$push": {"messages": {"$each": messages}},
            "$inc": {"total_tokens": tokens},
            "$set": {"updated_at": datetime.utcnow()},
        },
        return_document=ReturnDocument.AFTER,
    )
    if doc is None:
        raise ConversationNotFoundError(f"Conversation {conversation_id} not found")
    return serialize_dataset(doc)


def delete_conversation(conversation_id: str, uid: str) -> None:
    doc = conversation_collection.find_one_and_delete(_conversation_owned_by(conversation_id, uid))
    if doc is None:
        raise ConversationNotFoundError(f"Conversation {conversation_id} not found")
    logger.info("Conversation %s deleted by user %s", conversation_id, uid)
