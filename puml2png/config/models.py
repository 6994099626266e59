from typing import Literal

from pydantic import BaseModel, Field, field_validator


class ServerConfig(BaseModel):
    url: str = "http://www.plantuml.com/plantuml"
    timeout: float = Field(default=10.0, gt=0)
    output_format: Literal["png", "svg"] = "png"


class WatchConfig(BaseModel):
    interval: float = Field(default=5.0, gt=0)
    recency_window: float = Field(default=10.0, gt=0)
    source_extension: str = ".puml"
    use_fs_events: bool = False

    @field_validator("source_extension")
    @classmethod
    def _leading_dot(cls, value: str) -> str:
        value = value.strip()
        if not value or value == ".":
            raise ValueError("source_extension must not be empty")
        return value if value.startswith(".") else f".{value}"


class LoggingConfig(BaseModel):
    level: Literal["debug", "info", "warning", "error"] = "info"
    format: Literal["text", "json"] = "text"


class Puml2PngConfig(BaseModel):
    server: ServerConfig = Field(default_factory=ServerConfig)
    watch: WatchConfig = Field(default_factory=WatchConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
