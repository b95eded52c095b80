"""
Pydantic schemas for task submission and uploads
"""
from pydantic import BaseModel, Field
from typing import Optional


class TaskSubmission(BaseModel):
    day_number: int = Field(..., ge=1, le=30)
    task_text: Optional[str] = Field(None, max_length=10000)
    file_url: Optional[str] = Field(None, max_length=1024)


class TaskSubmitResponse(BaseModel):
    success: bool = True
    day: int
    day_completed: bool
    message: str


class UploadResponse(BaseModel):
    success: bool = True
    url: str
    filename: str
