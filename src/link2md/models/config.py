"""Pydantic configuration models for link2md."""

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class ByteSize(int):
    """
    Custom type that parses human-readable byte sizes.

    Accepts:
        - Integers (bytes)
        - Strings like '200kb', '1mb', '5gb'

    Examples:
        >>> ByteSize._parse('200kb')
        204800
        >>> ByteSize._parse(1024)
        1024
    """

    @classmethod
    def __get_pydantic_core_schema__(cls, source: Any, handler: Any) -> Any:
        from pydantic_core import core_schema

        return core_schema.no_info_plain_validator_function(cls._parse)

    @classmethod
    def _parse(cls, v: Any) -> int:
        if isinstance(v, int):
            return v
        if isinstance(v, str):
            v = v.lower().strip()
            # Order matters: check longer suffixes first
            units = [("gb", 1024**3), ("mb", 1024**2), ("kb", 1024), ("b", 1)]
            for unit, mult in units:
                if v.endswith(unit):
                    num_str = v[: -len(unit)].strip()
                    try:
                        return int(float(num_str) * mult)
                    except ValueError as err:
                        raise ValueError(f"Invalid number in byte size: {v}") from err
            try:
                return int(v)
            except ValueError:
                pass
        raise ValueError(f"Invalid byte size: {v}. Use format like '200kb', '1mb', or integer bytes.")


class NetworkConfig(BaseModel):
    """Configuration for the page fetch."""

    user_agent: str = Field(DEFAULT_USER_AGENT, description="User-Agent header sent to origin servers")
    accept_language: str = Field(
        "zh-CN,zh;q=0.9,en;q=0.8",
        description="Accept-Language header sent to origin servers",
    )
    timeout: float = Field(15.0, gt=0, description="Total fetch timeout in seconds")
    max_content_size: ByteSize = Field(
        ByteSize(10 * 1024**2),
        description="Maximum response body size (e.g., '5mb')",
    )
    proxy: Optional[str] = Field(None, description="HTTP/HTTPS proxy URL")
    block_private_ips: bool = Field(
        False,
        description="Reject URLs that point at private, loopback or link-local addresses",
    )

    model_config = {"extra": "forbid"}


class ExtractionConfig(BaseModel):
    """Configuration for article extraction heuristics."""

    fallback_threshold: int = Field(
        100,
        ge=0,
        description="Profile results with less trimmed content than this use the generic fallback",
    )

    model_config = {"extra": "forbid"}


class RenderConfig(BaseModel):
    """Markdown render rule set."""

    heading_style: Literal["atx", "setext"] = Field("atx", description="Heading marker style")
    code_fence: Literal["```", "~~~"] = Field("```", description="Fence used for code blocks")
    horizontal_rule: str = Field("---", min_length=3, description="Token emitted for <hr>")
    bullet_list_marker: Literal["-", "*", "+"] = Field("-", description="Unordered list marker")
    em_delimiter: Literal["*", "_"] = Field("*", description="Emphasis delimiter (strong doubles it)")
    gfm: bool = Field(True, description="Render tables and task lists GFM-style")

    model_config = {"extra": "forbid", "frozen": True}


class ServerConfig(BaseModel):
    """Configuration for the HTTP service."""

    host: str = Field("127.0.0.1", description="Interface to bind")
    port: int = Field(8080, ge=1, le=65535, description="Port to listen on")

    model_config = {"extra": "forbid"}


class Link2mdConfig(BaseModel):
    """
    Root configuration model for link2md.

    Example:
        config = Link2mdConfig(
            network=NetworkConfig(timeout=30),
            render=RenderConfig(gfm=False),
        )

    YAML format:
        network:
          timeout: 30
          block_private_ips: true
        extraction:
          fallback_threshold: 200
        render:
          bullet_list_marker: "*"
    """

    network: NetworkConfig = Field(default_factory=NetworkConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "INFO",
        description="Logging level",
    )
    log_file: Optional[Path] = Field(None, description="Log file path")

    model_config = {"extra": "forbid"}

    def to_yaml(self) -> str:
        """Serialize config to YAML string."""
        import yaml

        return yaml.dump(self.model_dump(mode="json", exclude_none=True), default_flow_style=False)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "Link2mdConfig":
        """Load config from YAML string."""
        import yaml

        data = yaml.safe_load(yaml_str) or {}
        return cls.model_validate(data)

    @classmethod
    def from_yaml_file(cls, path: Path) -> "Link2mdConfig":
        """Load config from YAML file."""
        return cls.from_yaml(path.read_text(encoding="utf-8"))
