"""Validated configuration models."""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from braid.kernel.errors import ConfigurationError

M = TypeVar("M", bound=BaseModel)


class BufferedConfig(BaseModel):
    """Bounded Concurrent Map settings.

    Attributes:
        limit: Maximum number of transformations in flight at once
    """

    model_config = ConfigDict(frozen=True)

    limit: int = Field(ge=1, description="Maximum number of in-flight transformations")


class RuntimeSettings(BaseModel):
    """Settings for the blocking host.

    Attributes:
        idle_timeout: Seconds block_on waits for a wake before declaring a
            deadlock; None waits forever
    """

    model_config = ConfigDict(frozen=True)

    idle_timeout: float | None = Field(default=0.0, ge=0)


def validated(model: type[M], **values: Any) -> M:
    """Build a config model, reporting failures as ConfigurationError."""
    try:
        return model(**values)
    except ValidationError as exc:
        raise ConfigurationError(f"invalid {model.__name__}: {exc}") from exc
