"""
Runtime settings for an analysis run.

Sources are merged in priority order:
    1. Defaults (defined on AnalysisConfig)
    2. Environment (MERGESCOPE_WORKERS, MERGESCOPE_TIMEOUT, MERGESCOPE_BASELINE)
    3. Explicit overrides from the CLI (None means "not given")

Example:
    >>> load_config(workers=8).workers
    8
"""

import os

from pydantic import BaseModel, Field, ValidationError

from mergescope.errors import InvalidInput
from mergescope.models.types import BaselinePolicy

_ENV_PREFIX = "MERGESCOPE_"


class AnalysisConfig(BaseModel):
    workers: int = Field(4, ge=1, le=64)        # parallel git queries
    timeout: float = Field(30.0, gt=0)          # seconds per git query
    baseline: BaselinePolicy = BaselinePolicy.FIRST


def _from_env() -> dict[str, str]:
    values = {}
    for name in AnalysisConfig.model_fields:
        raw = os.environ.get(f"{_ENV_PREFIX}{name.upper()}")
        if raw:
            values[name] = raw
    return values


def load_config(**overrides) -> AnalysisConfig:
    """Builds the config from env vars and non-None keyword overrides."""
    values: dict[str, object] = dict(_from_env())
    values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return AnalysisConfig(**values)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(p) for p in first["loc"]) or "config"
        raise InvalidInput(
            f"Invalid setting '{field}': {first['msg']}",
            details={"value": str(values.get(field, ""))},
        ) from e
