from pydantic import BaseModel, Field, field_validator
from typing import Literal, Optional

class InfoRequest(BaseModel):
    # Optional so a missing URL is reported as an invalid URL (400), not a schema error
    url: Optional[str] = Field(None, description="YouTube or Instagram URL")

    @field_validator("url")
    @classmethod
    def strip_url(cls, v):
        return v.strip() if isinstance(v, str) else v

class DownloadRequest(InfoRequest):
    format: Literal["video", "audio"] = Field("video", description="Media kind to download")
    quality: str = Field("best", description='Quality label, e.g. "1080p" or "192kbps"')
