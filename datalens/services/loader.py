import pandas as pd
import json
import logging
import os
import uuid
from typing import Dict, List, Any, Tuple
from datalens.models.loader import DatasetAnalysis
from datalens.models.profile import AnalysisResult
from datalens.constants.stat import (
    llm,
    UPLOAD_FOLDER,
    MAX_FILE_SIZE,
    CSV_SAMPLE_ROWS,
    SUPPORTED_EXTENSIONS,
)
from datalens.constants.loader import DATASET_SUMMARY_TEMPLATE
from datalens.exceptions import DatasetDecodeError, FileTooLargeError, UnsupportedFileTypeError
from datalens.services.profiler import analyze_data

logger = logging.getLogger(__name__)


def detect_file_type(filename: str) -> str:
    """Map a filename to the decoder that handles it"""
    ext = os.path.splitext(filename)[1].lower()
    if ext not in SUPPORTED_EXTENSIONS:
        raise UnsupportedFileTypeError(
            f"Unsupported file type '{ext or filename}'. Supported: {', '.join(SUPPORTED_EXTENSIONS)}"
        )
    return SUPPORTED_EXTENSIONS[ext]


def process_csv(file_path: str) -> Tuple[List[Dict[str, str]], Dict[str, Any]]:
    """Decode a CSV file into string-valued rows; empty cells stay as ''"""
    try:
        df = pd.read_csv(file_path, dtype=str, keep_default_na=False)
    except (ValueError, pd.errors.ParserError) as e:
        logger.error("CSV processing error for %s", file_path, exc_info=True)
        raise DatasetDecodeError(f"Could not parse CSV file: {e}") from e

    rows = df.to_dict("records")
    metadata = {
        "columns": [str(col) for col in df.columns],
        "row_count": len(rows),
        "sample_data": rows[:CSV_SAMPLE_ROWS],
    }
    return rows, metadata


def process_json(file_path: str) -> Tuple[Any, Dict[str, Any]]:
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except ValueError as e:
        logger.error("JSON processing error for %s", file_path, exc_info=True)
        raise DatasetDecodeError(f"Could not parse JSON file: {e}") from e

    if isinstance(data, list):
        first = data[0] if data and isinstance(data[0], dict) else {}
        metadata = {"type": "array", "keys": list(first.keys()), "item_count": len(data)}
    else:
        keys = list(data.keys()) if isinstance(data, dict) else []
        metadata = {"type": "object", "keys": keys, "item_count": 1}
    return data, metadata


def process_text(file_path: str) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            content = f.read()
    except UnicodeDecodeError as e:
        logger.error("Text processing error for %s", file_path, exc_info=True)
        raise DatasetDecodeError(f"Could not decode text file as UTF-8: {e}") from e

    lines = content.split("\n")
    metadata = {
        "line_count": len(lines),
        "character_count": len(content),
        "word_count": len(content.split()),
    }
    return {"content": content, "lines": lines}, metadata


DECODERS = {
    "csv": process_csv,
    "json": process_json,
    "text": process_text,
}


def save_file_to_folder(content: bytes, filename: str) -> str:
    """Save uploaded file under a unique name in the upload folder"""
    if len(content) > MAX_FILE_SIZE:
        raise FileTooLargeError(
            f"File is {len(content)} bytes, the limit is {MAX_FILE_SIZE} bytes"
        )
    os.makedirs(UPLOAD_FOLDER, exist_ok=True)
    stem, ext = os.path.splitext(os.path.basename(filename))
    file_path = os.path.join(UPLOAD_FOLDER, f"{stem}-{uuid.uuid4().hex[:12]}{ext.lower()}")
    with open(file_path, 'wb') as f:
        f.write(content)
    return file_path


def remove_stored_file(file_path: str) -> None:
    if os.path.exists(file_path):
        os.remove(file_path)
        logger.info("Removed stored upload %s", file_path)


def get_sample_records(data: Any, file_type: str, n: int = 5) -> List[Any]:
    """Pick a handful of decoded records to show the LLM"""
    if file_type == "csv":
        return list(data[:n])
    if file_type == "json":
        return list(data[:n]) if isinstance(data, list) else [data]
    return [line for line in data["lines"] if line.strip()][:n]


def generate_ai_summary(file_type: str, analysis: AnalysisResult, sample_rows: List[Any]) -> str:
    """Generate AI summary using LangChain"""
    chain = DATASET_SUMMARY_TEMPLATE | llm
    response = chain.invoke({
        "file_type": file_type.upper(),
        "profile": json.dumps(analysis.summary.model_dump(), indent=2, default=str),
        "sample_rows": json.dumps(sample_rows, indent=2, default=str),
    })
    return response.content


def _record_count(file_type: str, metadata: Dict[str, Any]) -> int:
    if file_type == "csv":
        return metadata["row_count"]
    if file_type == "json":
        return metadata["item_count"]
    return metadata["line_count"]


def analyze_file(content: bytes, filename: str, summarize: bool = False) -> DatasetAnalysis:
    """Complete dataset analysis pipeline"""
    file_type = detect_file_type(filename)
    file_path = save_file_to_folder(content, filename)
    logger.info("Stored upload %s at %s (%d bytes)", filename, file_path, len(content))

    try:
        data, metadata = DECODERS[file_type](file_path)
        analysis = analyze_data(data, file_type)
    except Exception:
        remove_stored_file(file_path)
        raise

    ai_summary = None
    if summarize:
        try:
            ai_summary = generate_ai_summary(file_type, analysis, get_sample_records(data, file_type))
            analysis.insights.append(ai_summary)
        except Exception:
            logger.warning("AI summary failed for %s", filename, exc_info=True)

    return DatasetAnalysis(
        file_type=file_type,
        file_path=file_path,
        original_name=filename,
        size=len(content),
        record_count=_record_count(file_type, metadata),
        metadata=metadata,
        analysis=analysis,
        ai_summary=ai_summary,
    )
