"""Configuration for relation graphs.

All settings can be overridden via environment variables with GRAPH_ prefix.
Example: GRAPH_USE_EQUAL=true
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GraphConfig(BaseSettings):
    """Relation graph configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GRAPH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    use_equal: bool = Field(
        default=False,
        description="Compare nodes by structural equality instead of hash/== identity",
    )

    default_depth: int = Field(
        default=-1,
        ge=-1,
        description="Traversal depth for reachability queries (-1 = unbounded)",
    )

    # Weight/entry table scaling
    log_scale: bool = Field(
        default=False,
        description="Apply ln(value + 1) to weights and entries",
    )
    normalize: bool = Field(
        default=False,
        description="Rescale weights and entries to the 0..1 range",
    )
    to_scale: bool = Field(
        default=False,
        description="When normalizing, divide by the sum instead of the maximum",
    )

    json_indent: int = Field(
        default=2,
        ge=0,
        le=8,
        description="Indentation used when writing dataset JSON files",
    )
