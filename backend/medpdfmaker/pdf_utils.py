"""
Low-level PDF utilities for filling the AcroForm claim template.

Each call loads its own template instance, fills the named text fields and
writes the result. Field names that the template does not know are a template
mismatch and abort the page before anything is written.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from pypdf import PdfReader, PdfWriter

from .errors import TemplateFieldError, TemplateNotFoundError

logger = logging.getLogger(__name__)

BUNDLED_TEMPLATE = Path(__file__).resolve().parent / "templates" / "claim_form.pdf"

PathLike = Union[str, Path]


def resolve_template_path(template_path: Optional[PathLike] = None) -> Path:
    """Return the configured template, or the bundled one when none is set."""
    candidate = Path(template_path) if template_path else BUNDLED_TEMPLATE
    if not candidate.is_file():
        raise TemplateNotFoundError(f"Template resource {candidate} is not found")
    return candidate


def load_template(template_path: PathLike) -> PdfReader:
    path = Path(template_path)
    if not path.is_file():
        raise TemplateNotFoundError(f"Template resource {path} is not found")
    return PdfReader(str(path), strict=False)


def list_form_fields(template_path: PathLike) -> List[str]:
    """Names of all form fields exposed by the template."""
    reader = load_template(template_path)
    return list((reader.get_fields() or {}).keys())


def fill_template(template_path: PathLike, values: Dict[str, str], target: PathLike) -> Path:
    """
    Fill a fresh copy of the template and save it to ``target``.

    Args:
        template_path: Path to the PDF template file.
        values: Mapping of PDF field name -> text value.
        target: Output file; overwritten if present.

    Returns:
        The path written.

    Raises:
        TemplateNotFoundError: the template file does not exist.
        TemplateFieldError: ``values`` names fields missing from the template.
        OSError: the output cannot be written.
    """
    template_path = Path(template_path)
    target = Path(target)

    reader = load_template(template_path)
    form_fields = reader.get_fields() or {}
    missing = [name for name in values if name not in form_fields]
    if missing:
        logger.error("Template %s lacks fields %s", template_path.name, missing)
        raise TemplateFieldError(missing, template_path.name)

    writer = PdfWriter(clone_from=reader)
    writer.update_page_form_field_values(writer.pages[0], values)

    buffer = io.BytesIO()
    writer.write(buffer)

    with target.open("wb") as f:
        f.write(buffer.getvalue())

    logger.debug("Filled template %s (%d fields) into %s", template_path.name, len(values), target)
    return target


def read_form_values(pdf_path: PathLike) -> Dict[str, Optional[str]]:
    """Text field values of a filled PDF, keyed by field name."""
    reader = PdfReader(str(pdf_path), strict=False)
    fields = reader.get_form_text_fields() or {}
    return {name: None if value is None else str(value) for name, value in fields.items()}
