from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ToolSettings(BaseSettings):
    """Settings for the govmocks command line itself.

    Override values never come from the environment; only the tool's
    behaviour does, with the pattern GOVMOCKS_<FIELD> (e.g. GOVMOCKS_LOG_LEVEL).
    """

    log_level: str = Field(default="INFO", description="Logging level name")
    default_sources: list[Path] = Field(
        default_factory=list,
        description="Override sources used when a command is given none (JSON list)",
    )

    model_config = SettingsConfigDict(
        extra="ignore",
        env_prefix="GOVMOCKS_",
    )
