from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _BaseConfigModel(BaseModel):
    model_config = ConfigDict(extra="allow")


class LoggingSettings(_BaseConfigModel):
    level: str = "INFO"
    json_output: bool = Field(default=False, alias="json")
    file_logging: bool = False
    log_dir: str = "logs"
    max_size: str = "10MB"
    backup_count: int = Field(default=3, ge=0)

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {value}")
        return level


class OutputSettings(_BaseConfigModel):
    output_dir: str = "."
    file_template: str = "{build_id}.ips"
    all_collections: bool = False

    @field_validator("file_template")
    @classmethod
    def _has_build_id(cls, value: str) -> str:
        if "{build_id}" not in value:
            raise ValueError("file_template must contain {build_id}")
        return value

    def file_name(self, build_id: str) -> str:
        return self.file_template.format(build_id=build_id)


class AppConfig(_BaseConfigModel):
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    output: OutputSettings = Field(default_factory=OutputSettings)


def validate_config(payload: Dict[str, Any]) -> AppConfig:
    return AppConfig.model_validate(payload)
