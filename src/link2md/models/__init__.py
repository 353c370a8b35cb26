"""Data models for link2md."""

from .config import (
    ByteSize,
    ExtractionConfig,
    Link2mdConfig,
    NetworkConfig,
    RenderConfig,
    ServerConfig,
)
from .events import EventType, Stage, StageEvent
from .results import ConversionResult, ExtractionResult
from .profiles import PROFILES, SiteProfile, resolve

__all__ = [
    # Config
    "ByteSize",
    "ExtractionConfig",
    "Link2mdConfig",
    "NetworkConfig",
    "RenderConfig",
    "ServerConfig",
    # Events
    "EventType",
    "Stage",
    "StageEvent",
    # Results
    "ConversionResult",
    "ExtractionResult",
    # Profiles
    "PROFILES",
    "SiteProfile",
    "resolve",
]
