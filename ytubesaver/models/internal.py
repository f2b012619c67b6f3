from pydantic import BaseModel

class ClassifiedUrl(BaseModel):
    """Supported URL with its platform and content id"""
    platform: str
    content_id: str
    url: str

class MediaPlan(BaseModel):
    """How one download request maps onto a yt-dlp invocation"""
    format_str: str
    ext: str
    audio_only: bool
