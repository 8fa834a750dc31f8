import os
from dotenv import load_dotenv
from langchain_groq import ChatGroq
load_dotenv()

GROQ_API_KEY = os.getenv("GROQ_API_KEY")
GROQ_MODEL = os.getenv("GROQ_MODEL", "llama-3.1-8b-instant")

MONGO_URI = os.getenv("MONGO_URI")
MONGO_DB = os.getenv("MONGO_DB", "datalens")

UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", "uploads")
MAX_FILE_SIZE = int(os.getenv("MAX_FILE_SIZE", str(10 * 1024 * 1024)))  # 10MB

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Profiler caps
TYPE_SAMPLE_SIZE = int(os.getenv("TYPE_SAMPLE_SIZE", "100"))
TYPE_RATIO_THRESHOLD = float(os.getenv("TYPE_RATIO_THRESHOLD", "0.8"))
STRUCTURE_MAX_DEPTH = int(os.getenv("STRUCTURE_MAX_DEPTH", "3"))
STRUCTURE_MAX_KEYS = int(os.getenv("STRUCTURE_MAX_KEYS", "10"))
SAMPLE_VALUES_LIMIT = int(os.getenv("SAMPLE_VALUES_LIMIT", "5"))
TOP_WORDS_LIMIT = int(os.getenv("TOP_WORDS_LIMIT", "10"))
CSV_SAMPLE_ROWS = int(os.getenv("CSV_SAMPLE_ROWS", "10"))

SUPPORTED_EXTENSIONS = {
    ".csv": "csv",
    ".json": "json",
    ".txt": "text",
}

llm = ChatGroq(
    model=GROQ_MODEL,
    temperature=0.0,
    max_retries=2,
)
