import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from datalens.constants.stat import LOG_LEVEL
from datalens.endpoints import conversations, loader, storage
from datalens.exceptions import (
    AIServiceError,
    ConversationNotFoundError,
    DatalensError,
    DatasetDecodeError,
    DatasetNotFoundError,
    FileTooLargeError,
    InvalidConversationIdError,
    InvalidDatasetIdError,
    UnsupportedFileTypeError,
)

logging.basicConfig(level=LOG_LEVEL)

app = FastAPI(title="Datalens API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  
    allow_credentials=True,
    allow_methods=["*"],  
    allow_headers=["*"],  
)

app.include_router(loader.router)
app.include_router(storage.router)
app.include_router(conversations.router)

STATUS_CODES = {
    DatasetNotFoundError: 404,
    InvalidDatasetIdError: 400,
    UnsupportedFileTypeError: 400,
    FileTooLargeError: 413,
    DatasetDecodeError: 422,
    ConversationNotFoundError: 404,
    InvalidConversationIdError: 400,
    AIServiceError: 502,
}


@app.exception_handler(DatalensError)
def _datalens_error(request: Request, exc: DatalensError) -> JSONResponse:
    return JSONResponse(status_code=STATUS_CODES.get(type(exc), 400), content={"detail": exc.message})


@app.get("/")
def root():
    return {"message": "Welcome to Datalens API"}


@app.get("/health", tags=["ops"])
def health() -> dict:
    return {"status": "ok"}
