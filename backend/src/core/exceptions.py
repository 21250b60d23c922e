from fastapi import HTTPException, status


class BadRequestError(HTTPException):
    def __init__(self, detail: str = "Bad request"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class PayloadTooLargeError(HTTPException):
    def __init__(self, detail: str = "Payload too large"):
        super().__init__(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=detail)


class PasswordReusedError(BadRequestError):
    def __init__(self, history_size: int):
        super().__init__(
            detail=(
                f"Password cannot match any of your last {history_size} passwords. "
                "Please choose a different password."
            )
        )
