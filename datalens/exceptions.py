class DatalensError(Exception):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class DatasetNotFoundError(DatalensError):
    """Dataset does not exist or is not visible to the caller."""


class InvalidDatasetIdError(DatalensError):
    """Dataset id is not a valid ObjectId."""


class UnsupportedFileTypeError(DatalensError):
    """File extension or analysis type has no decoder."""


class DatasetDecodeError(DatalensError):
    """Stored bytes could not be decoded into rows, a tree or text."""


class FileTooLargeError(DatalensError):
    """Upload exceeds MAX_FILE_SIZE."""


class ConversationNotFoundError(DatalensError):
    """Conversation does not exist or belongs to another user."""


class InvalidConversationIdError(DatalensError):
    """Conversation id is not a valid ObjectId."""


class AIServiceError(DatalensError):
    """The LLM call behind a chat turn failed."""
