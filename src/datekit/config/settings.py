"""Library settings read from ``DATEKIT_*`` environment variables.

Priority chain (highest to lowest):
  1. Init kwargs: e.g. CLI flags
  2. Env vars: ``DATEKIT_*`` prefix
  3. Code defaults
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class DatekitSettings(BaseSettings):
    """Defaults used when a call does not pass its own value.

    Attributes:
        default_zone: IANA zone used when no zone is given.
        disambiguation: DST policy for wall times in an overlap or gap.
        search_max_years: Safety bound of a single pattern search, in years
            of scanned days.
        scan_block_days: Days evaluated per vectorized scan block.
        enumerate_max_matches: Upper bound on matches one enumeration emits.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "DATEKIT_",
    }

    default_zone: str = "UTC"
    disambiguation: Literal["earlier", "later", "raise"] = "earlier"
    search_max_years: int = Field(default=10, ge=1)
    scan_block_days: int = Field(default=366, ge=1)
    enumerate_max_matches: int = Field(default=10_000, ge=1)


@lru_cache(maxsize=1)
def get_settings() -> DatekitSettings:
    return DatekitSettings()
