"""Per-member claim form generation."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Sequence

from .config import Settings
from .field_map import build_page_fields, page_file_name, total_charges
from .pagination import PAGE_CAPACITY, PageInfo, paginate
from .pdf_utils import fill_template, resolve_template_path
from .records import ServiceRecord

logger = logging.getLogger(__name__)


class MemberPdfGenerator:
    """Turns one member's service records into filled claim form pages."""

    def __init__(self, settings: Settings, template_path: Optional[Path] = None):
        self.settings = settings
        self.template_path = resolve_template_path(template_path or settings.template_path)

    def generate(self, output_dir: Path, records: Sequence[ServiceRecord]) -> List[Path]:
        """
        Write one PDF per page of ``records`` into ``output_dir``.

        The first record supplies the header of every page. Pages are written
        in order; the first failure aborts the remaining pages.
        """
        if not records:
            return []

        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        header = records[0]
        total = total_charges(records)
        result: List[Path] = []
        for page, rows in paginate(records, PAGE_CAPACITY):
            result.append(self._generate_page(page, header, rows, total, output_dir))

        logger.info("Member %s: %d record(s) -> %d page(s)", header.member_id, len(records), len(result))
        return result

    def _generate_page(
        self,
        page: PageInfo,
        header: ServiceRecord,
        rows: List[ServiceRecord],
        total,
        output_dir: Path,
    ) -> Path:
        target = page_file_name(header.member_id, page.page_num, output_dir)
        values = build_page_fields(header, rows, page, self.settings, total)
        fill_template(self.template_path, values, target)
        logger.info("Wrote page %d/%d for member %s: %s", page.page_num, page.page_count, header.member_id, target.name)
        return target
