from dataclasses import dataclass
from typing import List, Optional
from redis.asyncio import Redis

@dataclass
class RuntimeState:
    """Centralized runtime state"""
    redis: Optional[Redis] = None
    ytdlp_command: Optional[List[str]] = None
    ytdlp_version: str = "unknown"

state = RuntimeState()
