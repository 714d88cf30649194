import json
import logging
from pathlib import Path
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from adp_layout.datamodels.types import ConfidenceAction, FieldsAction

_log = logging.getLogger(__name__)

DEFAULT_MAX_THREADS = 3


class AdpConfig(BaseModel):
    """Processing settings, as stored in the connector's ``adp.json`` file.

    Service endpoints and credentials in the same file are ignored.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    multi_threading: Union[bool, str] = Field(default="true", alias="multiThreading")
    max_threads: int = DEFAULT_MAX_THREADS
    field_suffix: str = "_ADP"

    fields_action: FieldsAction = FieldsAction.KEEP_ALL
    confidence_action: ConfidenceAction = ConfidenceAction.KEEP_ALL

    @field_validator("fields_action", mode="before")
    @classmethod
    def _parse_fields_action(cls, value):
        if isinstance(value, FieldsAction):
            return value
        return FieldsAction.parse(value)

    @field_validator("confidence_action", mode="before")
    @classmethod
    def _parse_confidence_action(cls, value):
        if isinstance(value, ConfidenceAction):
            return value
        return ConfidenceAction.parse(value)

    @classmethod
    def load(cls, path: Path) -> "AdpConfig":
        with open(path, "r", encoding="utf-8") as fr:
            raw = json.load(fr)
        config = cls.model_validate(raw)
        _log.debug(f"Loaded configuration from {path}")
        return config

    @property
    def use_multi_threading(self) -> bool:
        if isinstance(self.multi_threading, bool):
            return self.multi_threading
        return self.multi_threading.strip().lower() == "true"
