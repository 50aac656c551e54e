"""Rule variant configuration."""

from __future__ import annotations

import os
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field

ENV_PREFIX = "CASINO_"


class RuleConfig(BaseModel):
    """Switches for the rule variants the engine supports."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    face_cards_capture_ten: bool = Field(
        False, description="J/Q/K may capture (and hold for) a build of 10"
    )
    allow_partial_rank_match: bool = Field(
        False, description="Offer each same-rank card or pair as its own capture set"
    )
    combine_builds_in_captures: bool = Field(
        True, description="Simple builds may join sum-combination captures"
    )
    capture_requires_control: bool = Field(
        False, description="Builds and pairs may only be captured by their controller"
    )
    cascading_captures: bool = Field(
        True, description="Keep capturing with the played card until nothing is capturable"
    )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RuleConfig:
        """Build a config from ``CASINO_<FIELD>`` environment variables.

        Unset variables keep their defaults.
        """
        environ = os.environ if environ is None else environ
        values = {}
        for name in cls.model_fields:
            key = f"{ENV_PREFIX}{name.upper()}"
            if key in environ:
                values[name] = environ[key]
        return cls.model_validate(values)


DEFAULT_RULES = RuleConfig()
