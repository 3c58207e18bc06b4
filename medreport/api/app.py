"""FastAPI application exposing the medical-report field parsers."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from medreport.core.labels import MODELS
from medreport.exceptions import MedicalReportException

log = logging.getLogger(__name__)

app = FastAPI(
    title="Medical Report Parsing API",
    description="Field extraction and training-data generation for French medical reports.",
    version="1.0.0",
)

# ---------------------------------------------------------------------------
# Lazy-loaded global resources
# ---------------------------------------------------------------------------
_parsers = None


def _get_parsers():
    global _parsers
    if _parsers is None:
        from medreport.engine import MedicalParsers
        _parsers = MedicalParsers()
    return _parsers


def _get_parser(entity: str):
    if entity not in MODELS:
        raise HTTPException(status_code=404, detail=f"Unknown entity: {entity}")
    return _get_parsers().get(entity)


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------
class ProcessRequest(BaseModel):
    text: str = Field(..., description="Text zone to parse")


class ProcessResponse(BaseModel):
    entity: str
    records: Optional[list[dict]] = None


class TrainingRequest(BaseModel):
    inputs: list[str] = Field(..., description="Text units, one entity zone each")
    original: list[str] = Field(default_factory=list, description="Values to anonymize")
    anonymized: list[str] = Field(default_factory=list, description="Replacement values")


class TrainingResponse(BaseModel):
    entity: str
    xml: Optional[str] = None


def _records_payload(result) -> Optional[list[dict]]:
    if result is None:
        return None
    if not isinstance(result, list):
        result = [result]
    seen = set()
    records = []
    # organizations repeat the same object once per cluster
    for record in result:
        if id(record) in seen:
            continue
        seen.add(id(record))
        records.append(record.to_dict())
    return records


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------
@app.get("/api/entities")
def list_entities():
    """Entities a parser is available for."""
    return {"entities": list(MODELS)}


@app.post("/api/process/{entity}", response_model=ProcessResponse)
def process_text(entity: str, req: ProcessRequest):
    """Extract the records of one entity type from a text zone."""
    parser = _get_parser(entity)
    try:
        result = parser.process(req.text)
    except MedicalReportException as e:
        log.error("Parsing %s failed: %s", entity, e.cause)
        raise HTTPException(status_code=500, detail=e.message)
    return ProcessResponse(entity=entity, records=_records_payload(result))


@app.post("/api/training/{entity}", response_model=TrainingResponse)
def training_data(entity: str, req: TrainingRequest):
    """Inline-tagged training text for the given units."""
    parser = _get_parser(entity)
    if len(req.original) != len(req.anonymized):
        raise HTTPException(status_code=422, detail="original and anonymized lengths differ")
    try:
        if req.original:
            xml = parser.training_extraction_anonym(req.inputs, req.original, req.anonymized)
        else:
            xml = parser.training_extraction(req.inputs)
    except MedicalReportException as e:
        log.error("Training extraction for %s failed: %s", entity, e.cause)
        raise HTTPException(status_code=500, detail=e.message)
    return TrainingResponse(entity=entity, xml=xml)


@app.get("/api/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}
