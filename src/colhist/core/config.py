"""Configuration management.

Uses pydantic-settings for type-safe configuration from environment variables.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from colhist.core.models import ErrorPolicy, MissingPolicy, Precision


class Settings(BaseSettings):
    """Application settings.

    All settings can be overridden via environment variables.
    Prefix: COLHIST_
    """

    model_config = SettingsConfigDict(
        env_prefix="COLHIST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Input
    delimiter: str = Field(
        default=",",
        min_length=1,
        description="String separating columns within a row",
    )
    encoding: str = Field(
        default="utf-8",
        description="Text encoding of the input rows",
    )
    placeholder_marker: str = Field(
        default="?",
        min_length=1,
        max_length=1,
        description="Character that prefixes a column index in an expression",
    )

    # Histogram
    num_bins: int = Field(
        default=10,
        ge=1,
        description="Number of histogram bins",
    )
    precision: Precision = Field(
        default=Precision.FLOAT64,
        description="Floating point width used for parsing and binning",
    )
    error_policy: ErrorPolicy = Field(
        default=ErrorPolicy.LENIENT,
        description="Skip rows that fail extraction (lenient) or abort (strict)",
    )
    missing_policy: MissingPolicy = Field(
        default=MissingPolicy.ERROR,
        description="Treat a row without the requested column as an error or skip it silently",
    )

    # Output
    label_decimals: int = Field(default=2, ge=0)
    count_decimals: int = Field(default=2, ge=0)
    write_header: bool = Field(
        default=False,
        description="Emit a bin_label/bin_value header line before the bins",
    )

    # Logging
    log_level: str = Field(default="WARNING")
    log_format: str = Field(default="console")  # 'json' or 'console'


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
