from __future__ import annotations

MISSING_FIELDS_MESSAGE = "Missing required fields: username, score, coins"


class APIError(Exception):
    def __init__(self, message: str, status_code: int):
        self.message = message
        self.status_code = status_code
        super().__init__(message)
