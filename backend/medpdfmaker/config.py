"""
Application configuration.

Values come from ``MEDPDF_*`` environment variables (the API entry point also
loads ``.env.local`` / ``.env`` through python-dotenv). They are read once at
startup and are read-only for the generator.
"""

from __future__ import annotations

import os
from decimal import ROUND_UP, Decimal, InvalidOperation
from functools import lru_cache
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "MEDPDF_"


class Settings(BaseModel):
    federal_tax_id: str = ""
    provider: str = ""
    place_of_service: str = ""
    procedures: str = ""
    # flat per-trip charge, used when a sheet row has no price
    charges: Decimal
    template_path: Optional[Path] = None
    output_dir: Path = Field(default_factory=lambda: Path("output"))
    # spreadsheets named over HTTP must live below this directory
    input_dir: Path = Field(default_factory=lambda: Path("input"))
    s3_bucket: Optional[str] = None
    s3_prefix: str = "medpdfmaker/"

    @field_validator("charges", mode="before")
    @classmethod
    def _parse_charges(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValueError("charges must be set")
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise ValueError(f"charges is not a number: {value!r}") from exc
        if not amount.is_finite() or amount <= 0:
            raise ValueError(f"charges must be positive, got {value!r}")
        return amount.quantize(Decimal("0.01"), rounding=ROUND_UP)

    @field_validator("template_path", "s3_bucket", mode="before")
    @classmethod
    def _blank_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Build ``Settings`` from ``MEDPDF_*`` keys of ``env`` (default: os.environ)."""
    env = os.environ if env is None else env
    values = {}
    for name in Settings.model_fields:
        key = ENV_PREFIX + name.upper()
        if key in env:
            values[name] = env[key]
    values.setdefault("charges", None)
    return Settings(**values)


@lru_cache()
def get_settings() -> Settings:
    return load_settings()
