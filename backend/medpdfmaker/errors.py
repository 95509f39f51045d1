"""Exception types raised by the claim form generator."""

from __future__ import annotations

from typing import Iterable


class MedPdfError(RuntimeError):
    """Domain-specific exception for generation errors."""


class TemplateNotFoundError(MedPdfError):
    """The PDF template resource cannot be located."""


class TemplateFieldError(MedPdfError):
    """The loaded template does not expose a field the page layout needs."""

    def __init__(self, missing: Iterable[str], template_name: str = "template"):
        self.missing = sorted(missing, key=_field_sort_key)
        super().__init__(
            f"No field(s) {', '.join(self.missing)} found in PDF {template_name}"
        )


class SpreadsheetFormatError(MedPdfError):
    """The billing spreadsheet cannot be turned into service records."""


def _field_sort_key(name: str):
    # Text2 before Text10
    digits = "".join(ch for ch in name if ch.isdigit())
    return (name.rstrip("0123456789"), int(digits) if digits else -1, name)
