from typing import Dict, Optional
from ytubesaver.models.internal import MediaPlan
from ytubesaver.models.request import DownloadRequest

AUDIO_FORMAT = 'bestaudio[ext=m4a]/bestaudio/best'
BEST_FORMAT = 'best'

# Quality label -> maximum pixel height
QUALITY_HEIGHTS: Dict[str, int] = {
    '2160p (4K)': 2160,
    '1440p': 1440,
    '1080p': 1080,
    '720p': 720,
    '480p': 480,
    '360p': 360,
}

class FormatDecision:
    """Make format decisions"""

    @staticmethod
    def height_for(quality: Optional[str]) -> Optional[int]:
        """Height ceiling for a quality label, None when unconstrained"""
        if not quality:
            return None
        return QUALITY_HEIGHTS.get(quality.strip())

    @staticmethod
    def decide(media_kind: str, quality: Optional[str]) -> str:
        """Decide yt-dlp format selector for a media kind and quality label"""
        if media_kind == 'audio':
            return AUDIO_FORMAT

        height = FormatDecision.height_for(quality)
        if height is None:
            return BEST_FORMAT
        return f'best[height<={height}]'

    @staticmethod
    def plan(request: DownloadRequest) -> MediaPlan:
        """Get media plan based on request"""
        format_str = FormatDecision.decide(request.format, request.quality)

        if request.format == 'audio':
            return MediaPlan(format_str=format_str, ext='mp3', audio_only=True)

        return MediaPlan(format_str=format_str, ext='mp4', audio_only=False)
