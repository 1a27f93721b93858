from fastapi import HTTPException

GENERIC_FAILURE_MESSAGE = "Operation failed."

class CustomException(HTTPException):
    def __init__(self, code: str, message: str, dev_message: str = "", status_code: int = 400, detail: str = ""):
        super().__init__(status_code=status_code, detail=message)
        self.code = code
        self.message = message
        self.dev_message = dev_message
        self.detail = detail

    def __str__(self):
        return f"[{self.code}] {self.dev_message or self.message}"

    # dev_message는 로그에만 남김
    def to_dict(self):
        return {
            "code": self.code,
            "message": self.message
        }

class StoreUnavailable(CustomException):
    """Transport or read failure. Nothing was committed; safe to retry."""
    def __init__(self, dev_message: str = ""):
        super().__init__(
            code="STORE_UNAVAILABLE",
            message=GENERIC_FAILURE_MESSAGE,
            dev_message=dev_message,
            status_code=503,
        )

class BatchCommitFailed(CustomException):
    """An atomic batch was rejected. Nothing was committed; safe to retry."""
    def __init__(self, dev_message: str = ""):
        super().__init__(
            code="BATCH_COMMIT_FAILED",
            message=GENERIC_FAILURE_MESSAGE,
            dev_message=dev_message,
            status_code=503,
        )

class ReferenceNotFound(CustomException):
    def __init__(self, collection: str, id: str):
        super().__init__(
            code="REFERENCE_NOT_FOUND",
            message=f"{collection} '{id}' not found",
            dev_message=f"reference {collection}/{id} does not resolve",
            status_code=404,
        )
        self.collection = collection
        self.id = id
