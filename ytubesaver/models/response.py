from typing import List, Optional

from pydantic import BaseModel, Field


class VideoFormat(BaseModel):
    """Single format offered by the extraction tool"""
    format_id: str
    ext: Optional[str] = None
    quality: str = "unknown"
    filesize: Optional[int] = None
    url: Optional[str] = None
    format_note: Optional[str] = None


class VideoInfo(BaseModel):
    """Video information response"""
    id: str
    title: str = "Unknown Title"
    thumbnail: str = ""
    duration: str = "00:00"
    uploader: str = "Unknown"
    platform: str
    formats: List[VideoFormat] = []


class VideoInfoResponse(BaseModel):
    success: bool = True
    videoInfo: VideoInfo


class DownloadResponse(BaseModel):
    success: bool
    message: str
    downloadUrl: Optional[str] = None
    filename: Optional[str] = None
    videoInfo: Optional[VideoInfo] = None


class HealthResponse(BaseModel):
    status: str
    message: str
    timestamp: str


class CleanupResponse(BaseModel):
    success: bool
    message: str
    deleted: int = Field(0, description="Number of files removed")
