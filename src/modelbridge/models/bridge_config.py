from __future__ import annotations

import os
from typing import Literal, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]

ENV_PREFIX = "MODELBRIDGE_"


class BridgeConfig(BaseModel):
    """Reserved key names and runtime knobs shared by decoding and expansion."""

    model_config = ConfigDict(frozen=True)

    reserved_type_key: str = "__typename"
    id_key: str = "id"
    # A has-many relation arrives as an object carrying both of these keys
    placeholder_keys: Tuple[str, str] = ("associatedField", "associatedId")
    log_level: LogLevel = "INFO"

    @field_validator("reserved_type_key", "id_key")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("reserved key names must be non-empty")
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value):
        if isinstance(value, str):
            return value.upper()
        return value

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "BridgeConfig":
        """Build a config from ``MODELBRIDGE_*`` variables; unset ones keep defaults.

        ``MODELBRIDGE_PLACEHOLDER_KEYS`` is a comma-separated pair.
        """
        env = os.environ if environ is None else environ
        values = {}
        for name in ("reserved_type_key", "id_key", "log_level"):
            raw = env.get(f"{ENV_PREFIX}{name.upper()}")
            if raw:
                values[name] = raw
        raw_keys = env.get(f"{ENV_PREFIX}PLACEHOLDER_KEYS")
        if raw_keys:
            values["placeholder_keys"] = tuple(part.strip() for part in raw_keys.split(","))
        return cls(**values)


DEFAULT_CONFIG = BridgeConfig()
