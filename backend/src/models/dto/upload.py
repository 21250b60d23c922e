from pydantic import BaseModel


class UploadVerificationResponse(BaseModel):
    filename: str
    content_type: str
    size_bytes: int
