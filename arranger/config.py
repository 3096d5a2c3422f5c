"""Arranger configuration loaded from the environment."""

from functools import lru_cache
from typing import Dict, List, Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from arranger.engine import thresholds as t
from arranger.engine.thresholds import PairingThresholds, RoleThresholds


class BatchSettings(BaseModel):
    """Mutation batch sizes."""

    template_batch_size: int = Field(default=t.TEMPLATE_BATCH_SIZE, ge=1)
    delegated_batch_size: int = Field(default=t.DELEGATED_BATCH_SIZE, ge=1)


class LLMSettings(BaseModel):
    """Decision collaborator configuration."""

    provider: Literal["anthropic", "openai"] = "anthropic"
    model: str = "claude-3-5-haiku-20241022"
    max_tokens: int = 2048
    temperature: float = 0.2
    timeout: float = 60.0


class CanvasSettings(BaseModel):
    """Remote canvas bridge configuration."""

    base_url: str = "http://127.0.0.1:3055"
    timeout: float = 30.0
    # Bridge-specific tool names, e.g. {"set_position": "move_node"}
    tool_aliases: Dict[str, str] = Field(default_factory=dict)


class ArrangerSettings(BaseSettings):
    """Arranger settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="ARRANGER_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    app_name: str = "Canvas Arranger"
    app_version: str = "0.3.0"
    debug: bool = False
    api_prefix: str = "/api/v1"
    log_level: str = "INFO"
    allowed_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"]
    )

    # Layout defaults
    clamp_margin: float = t.CLAMP_MARGIN
    corner_radius: float = t.CORNER_RADIUS

    roles: RoleThresholds = Field(default_factory=RoleThresholds)
    pairing: PairingThresholds = Field(default_factory=PairingThresholds)
    batches: BatchSettings = Field(default_factory=BatchSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    canvas: CanvasSettings = Field(default_factory=CanvasSettings)


@lru_cache()
def get_settings() -> ArrangerSettings:
    """Get cached settings instance."""
    return ArrangerSettings()
