from .internal import ClassifiedUrl, MediaPlan
from .request import DownloadRequest, InfoRequest
from .response import DownloadResponse, VideoFormat, VideoInfo

__all__ = [
    "ClassifiedUrl",
    "DownloadRequest",
    "DownloadResponse",
    "InfoRequest",
    "MediaPlan",
    "VideoFormat",
    "VideoInfo",
]
