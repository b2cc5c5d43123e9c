"""
Pydantic request/response models for the HTTP API.

Field names are snake_case in Python and camelCase on the wire.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class UploadResponse(CamelModel):
    """Response of POST /api/upload"""
    upload_id: str = Field(..., alias="uploadId", description="Reference passed to /api/translate")
    size: int = Field(..., description="Stored size in bytes")


class TranslateRequest(CamelModel):
    """Body of POST /api/translate"""
    upload_id: str = Field(..., alias="uploadId", description="Id returned by /api/upload")
    source_lang: Optional[str] = Field(default=None, alias="sourceLang", description="Source language (code or name)")
    target_lang: Optional[str] = Field(default=None, alias="targetLang", description="Target language (code or name)")
    model: Optional[str] = Field(default=None, description="Model identifier; server default when omitted")


class CleanupResponse(CamelModel):
    """Response of POST /api/cleanup"""
    message: str
    deleted_files: int = Field(..., alias="deletedFiles")
    deleted: List[str] = Field(default_factory=list)


class HealthResponse(CamelModel):
    status: str = "ok"
    version: str
    provider: str
    model: str
