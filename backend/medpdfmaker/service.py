"""
High-level service that exposes claim form generation to the FastAPI layer.

Responsibilities
----------------
* hold the loaded configuration and the member page generator
* group ingested service records per member and generate their pages
* optionally mirror the produced pages to S3
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Union

import boto3

from .config import Settings, get_settings
from .errors import MedPdfError
from .field_map import sanitize_member_id
from .generator import MemberPdfGenerator
from .pdf_utils import list_form_fields
from .records import ServiceRecord
from .spreadsheet import group_by_member, read_service_records

logger = logging.getLogger(__name__)


class ClaimFormService:
    def __init__(self, settings: Optional[Settings] = None, s3_client=None):
        self.settings = settings or get_settings()
        self.generator = MemberPdfGenerator(self.settings)

        self.s3_bucket = self.settings.s3_bucket
        self.s3_prefix = self.settings.s3_prefix
        self.s3 = s3_client
        if self.s3_bucket and self.s3 is None:
            self.s3 = boto3.client("s3")

    @property
    def template_path(self) -> Path:
        return self.generator.template_path

    def template_fields(self) -> List[str]:
        return list_form_fields(self.template_path)

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------
    def generate_member(
        self,
        records: Sequence[ServiceRecord],
        output_dir: Optional[Path] = None,
    ) -> List[Path]:
        output_dir = Path(output_dir or self.settings.output_dir)
        member_id = records[0].member_id if records else "<none>"
        try:
            pages = self.generator.generate(output_dir, records)
        except (MedPdfError, OSError) as exc:
            logger.error("Generation failed for member %s: %s", member_id, exc)
            raise

        if self.s3_bucket:
            for page in pages:
                self._upload_page(page)
        return pages

    def generate_batch(
        self,
        records: Iterable[ServiceRecord],
        output_dir: Optional[Path] = None,
    ) -> Dict[str, List[Path]]:
        """Generate pages for every member found in ``records``, in order."""
        groups = group_by_member(records)
        _check_file_name_clashes(groups)
        result: Dict[str, List[Path]] = {}
        for member_id, member_records in groups.items():
            result[member_id] = self.generate_member(member_records, output_dir)
        logger.info(
            "Generated %d page(s) for %d member(s)",
            sum(len(pages) for pages in result.values()),
            len(result),
        )
        return result

    def generate_from_spreadsheet(
        self,
        source: Union[str, Path],
        output_dir: Optional[Path] = None,
        sheet_name: Union[str, int] = 0,
    ) -> Dict[str, List[Path]]:
        records = read_service_records(source, sheet_name=sheet_name, default_price=self.settings.charges)
        return self.generate_batch(records, output_dir)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _upload_page(self, page: Path) -> str:
        key = f"{self.s3_prefix}{page.name}"
        with page.open("rb") as f:
            self.s3.put_object(Bucket=self.s3_bucket, Key=key, Body=f.read(), ContentType="application/pdf")
        logger.info("Uploaded %s to s3://%s/%s", page.name, self.s3_bucket, key)
        return key


def _check_file_name_clashes(groups: Dict[str, List[ServiceRecord]]) -> None:
    # page files are named after the sanitized member id
    seen: Dict[str, str] = {}
    for member_id in groups:
        stem = sanitize_member_id(member_id)
        if stem in seen:
            raise MedPdfError(
                f"Member ids {seen[stem]!r} and {member_id!r} map to the same file name {stem!r}"
            )
        seen[stem] = member_id
