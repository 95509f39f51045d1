"""
Medical transport claim form generator.

This package bundles:
  - ingestion of billing spreadsheets into service records
  - pagination of a member's trips into claim form pages
  - mapping of records onto the claim form template fields and filling it
"""

from .config import Settings, get_settings, load_settings
from .errors import MedPdfError, SpreadsheetFormatError, TemplateFieldError, TemplateNotFoundError
from .generator import MemberPdfGenerator
from .records import CellPosition, ServiceRecord
from .service import ClaimFormService

__all__ = [
    "CellPosition",
    "ClaimFormService",
    "MedPdfError",
    "MemberPdfGenerator",
    "ServiceRecord",
    "Settings",
    "SpreadsheetFormatError",
    "TemplateFieldError",
    "TemplateNotFoundError",
    "get_settings",
    "load_settings",
]
