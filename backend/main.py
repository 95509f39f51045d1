import datetime as dt
import logging
import uuid
from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(".env.local"); load_dotenv()  # also loads .env if present

import os  # noqa: E402
from typing import Dict, List, Optional, Union  # noqa: E402

from cachetools import TTLCache  # noqa: E402
from fastapi import Depends, FastAPI, HTTPException, Response  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from pydantic import BaseModel  # noqa: E402

from medpdfmaker import ClaimFormService, MedPdfError, ServiceRecord  # noqa: E402
from medpdfmaker.pdf_utils import read_form_values  # noqa: E402

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("medpdfmaker.api")

app = FastAPI(title="MedPdfMaker")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:8501",
        "http://127.0.0.1:8501",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

BATCH_TTL = int(os.getenv("BATCH_TTL", "3600"))  # 1 hour default
BATCHES = TTLCache(maxsize=256, ttl=BATCH_TTL)


@lru_cache()
def get_service() -> ClaimFormService:
    return ClaimFormService()


class ServiceRecordIn(BaseModel):
    member_id: str
    name: str
    pickup_date: dt.date
    origin: str
    ref_id: str
    trip_price: Decimal
    city: str = ""
    state: str = ""
    zip_code: str = ""
    area_code: str = ""
    phone: str = ""
    dob: Optional[dt.date] = None

    def to_record(self) -> ServiceRecord:
        return ServiceRecord(**self.model_dump())


class GenerateRequest(BaseModel):
    records: List[ServiceRecordIn]


class SpreadsheetRequest(BaseModel):
    path: str  # relative to the configured input directory
    sheet_name: Union[str, int] = 0


def _new_batch(service: ClaimFormService) -> tuple:
    batch_id = uuid.uuid4().hex
    return batch_id, Path(service.settings.output_dir) / batch_id


def _register_batch(batch_id: str, batch_dir: Path, pages: Dict[str, List[Path]]) -> dict:
    members = {member_id: [p.name for p in paths] for member_id, paths in pages.items()}
    BATCHES[batch_id] = {
        "dir": batch_dir,
        "files": {p.name for paths in pages.values() for p in paths},
        "created_at": dt.datetime.now(dt.timezone.utc).isoformat(),
    }
    return {"batch_id": batch_id, "members": members}


def _input_file(service: ClaimFormService, name: str) -> Path:
    """Resolve a spreadsheet name against the configured input directory."""
    root = Path(service.settings.input_dir).resolve()
    path = (root / name).resolve()
    try:
        path.relative_to(root)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Spreadsheet must be inside the input directory: {name}") from exc
    return path


def _batch_file(batch_id: str, file_name: str) -> Path:
    batch = BATCHES.get(batch_id)
    if not batch or file_name not in batch["files"]:
        raise HTTPException(status_code=404, detail="PDF not found")
    path = batch["dir"] / file_name
    if not path.is_file():
        raise HTTPException(status_code=404, detail="PDF not found")
    return path


@app.get("/hello")
def read_root():
    return {"msg": "Hello from MedPdfMaker!"}


# --- Claim form endpoints -----------------------------------------------------


@app.get("/template/fields")
def template_fields(service: ClaimFormService = Depends(get_service)):
    try:
        fields = service.template_fields()
    except MedPdfError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"template": service.template_path.name, "fields": fields}


@app.post("/claims/generate")
def claims_generate(req: GenerateRequest, service: ClaimFormService = Depends(get_service)):
    if not req.records:
        raise HTTPException(status_code=400, detail="No service records supplied.")
    batch_id, batch_dir = _new_batch(service)
    try:
        pages = service.generate_batch([r.to_record() for r in req.records], output_dir=batch_dir)
    except MedPdfError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _register_batch(batch_id, batch_dir, pages)


@app.post("/claims/spreadsheet")
def claims_from_spreadsheet(req: SpreadsheetRequest, service: ClaimFormService = Depends(get_service)):
    source = _input_file(service, req.path)
    batch_id, batch_dir = _new_batch(service)
    try:
        pages = service.generate_from_spreadsheet(source, output_dir=batch_dir, sheet_name=req.sheet_name)
    except MedPdfError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _register_batch(batch_id, batch_dir, pages)


@app.get("/claims/{batch_id}/{file_name}")
def claims_get_page(batch_id: str, file_name: str):
    """Download a generated page"""
    path = _batch_file(batch_id, file_name)
    headers = {"Content-Disposition": f'attachment; filename="{file_name}"'}
    return Response(content=path.read_bytes(), media_type="application/pdf", headers=headers)


@app.get("/claims/{batch_id}/{file_name}/fields")
def claims_get_page_fields(batch_id: str, file_name: str):
    """Filled form values of a generated page, for review."""
    path = _batch_file(batch_id, file_name)
    return {"file_name": file_name, "fields": read_form_values(path)}
