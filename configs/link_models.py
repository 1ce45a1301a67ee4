from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Any, Mapping, Union

from pydantic import BaseModel, Field, ValidationError

from configs.appconfig import AppConfig

logger = logging.getLogger(__name__)


class AssemblyMode(str, Enum):
    """The two circle-intersection branches of joint B.

    OPEN is the candidate on the right-hand side of the directed line from
    joint A to the output pivot, CROSSED its mirror image.
    """
    OPEN = 'open'
    CROSSED = 'crossed'

    @classmethod
    def parse(cls, value: Union[AssemblyMode, str, int]) -> AssemblyMode:
        """Accept the enum itself, its string value or the legacy +1/-1 flag."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        elif isinstance(value, int) and not isinstance(value, bool):
            if value == 1:
                return cls.OPEN
            if value == -1:
                return cls.CROSSED
        raise ValueError(f"Unknown assembly mode: {value!r}. Use 'open', 'crossed', 1 or -1")


class LinkageConfig(BaseModel):
    """One four-bar mechanism instance with a coupler point.

    The ground pivots sit at (0, 0) and (r1, 0). Angles are in degrees.
    """
    r1: float = Field(default=AppConfig.DEFAULT_R1, gt=0, description="Ground link length (pivot to pivot)")
    r2: float = Field(default=AppConfig.DEFAULT_R2, gt=0, description="Crank length (first pivot to joint A)")
    r3: float = Field(default=AppConfig.DEFAULT_R3, gt=0, description="Coupler length (joint A to joint B)")
    r4: float = Field(default=AppConfig.DEFAULT_R4, gt=0, description="Output link length (second pivot to joint B)")
    r6: float = Field(default=AppConfig.DEFAULT_R6, ge=0, description="Distance from joint A to coupler point C")
    beta: float = Field(default=AppConfig.DEFAULT_BETA, description="Angle of A->C relative to A->B, degrees")
    theta2: float = Field(default=AppConfig.DEFAULT_THETA2, description="Driver (crank) angle from the ground line, degrees")

    model_config = {
        "frozen": True,
        "extra": "forbid",
        "allow_inf_nan": False,
    }

    def with_theta2(self, theta2: float) -> LinkageConfig:
        """Copy with only the driver angle replaced."""
        return self.model_copy(update={'theta2': float(theta2)})

    def geometry_key(self) -> tuple[float, float, float, float, float, float]:
        """Everything that shapes the coupler curve (driver angle excluded)."""
        return (self.r1, self.r2, self.r3, self.r4, self.r6, self.beta)

    def link_lengths(self) -> dict[str, float]:
        return {'ground': self.r1, 'crank': self.r2, 'coupler': self.r3, 'rocker': self.r4}

    def as_dict(self) -> dict[str, float]:
        return self.model_dump()


def config_from_params(params: Mapping[str, Any]) -> LinkageConfig:
    """
    Seed a LinkageConfig from loosely typed key/value parameters.

    Each field is parsed independently: a value that is missing, not a number,
    not finite, or outside the field's constraint falls back to the default
    for that field only.

    Args:
        params: e.g. query-string parameters {'r1': '1.5', 'beta': 'abc'}

    Returns:
        A valid LinkageConfig
    """
    values: dict[str, float] = {}
    for name in LinkageConfig.model_fields:
        raw = params.get(name)
        if raw is None or raw == '':
            continue
        try:
            value = float(raw)
        except (TypeError, ValueError):
            logger.debug(f"Ignoring unparseable parameter {name}={raw!r}")
            continue
        if not math.isfinite(value):
            logger.debug(f"Ignoring non-finite parameter {name}={raw!r}")
            continue
        try:
            LinkageConfig(**{name: value})
        except ValidationError:
            logger.debug(f"Ignoring out-of-range parameter {name}={value}")
            continue
        values[name] = value

    return LinkageConfig(**values)
