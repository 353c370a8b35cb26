"""
link2md - Convert article URLs into clean Markdown.

Usage:
    from link2md import ArticleConverter, Link2mdConfig

    async with ArticleConverter(Link2mdConfig()) as converter:
        result = await converter.convert("https://blog.csdn.net/user/article/details/1")
        print(result.markdown)
"""

__version__ = "1.0.0"

from .core.converter import ArticleConverter, convert_blocking
from .exceptions import ConversionError, ExtractionError, FetchError, InputError, Link2mdError
from .models.config import (
    ExtractionConfig,
    Link2mdConfig,
    NetworkConfig,
    RenderConfig,
    ServerConfig,
)
from .models.events import EventType, Stage, StageEvent
from .models.profiles import PROFILES, SiteProfile, resolve
from .models.results import ConversionResult, ExtractionResult

__all__ = [
    "__version__",
    # Core
    "ArticleConverter",
    "convert_blocking",
    # Config
    "Link2mdConfig",
    "NetworkConfig",
    "ExtractionConfig",
    "RenderConfig",
    "ServerConfig",
    # Profiles
    "PROFILES",
    "SiteProfile",
    "resolve",
    # Results
    "ConversionResult",
    "ExtractionResult",
    # Events
    "EventType",
    "Stage",
    "StageEvent",
    # Errors
    "Link2mdError",
    "InputError",
    "FetchError",
    "ExtractionError",
    "ConversionError",
]
