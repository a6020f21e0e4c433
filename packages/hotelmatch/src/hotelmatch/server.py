"""FastAPI server exposing ingestion, the review queue and reporting."""

from datetime import datetime
from typing import Any

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field

from hotelmatch.errors import (
    ConflictError,
    HotelMatchError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from hotelmatch.io import mappings_dataframe
from hotelmatch.service import MappingService
from hotelmatch.types import (
    HistoryAction,
    MappingStatus,
    MasterStatus,
    PotentialMatchStatus,
    RecommendedAction,
)

log = structlog.get_logger()

ERROR_STATUS: dict[type[HotelMatchError], int] = {
    ValidationError: 400,
    NotFoundError: 404,
    ConflictError: 409,
    PersistenceError: 503,
}


class HotelFields(BaseModel):
    """Descriptive fields shared by master and supplier payloads."""

    hotel_name: str | None = None
    address_line1: str | None = None
    city: str | None = None
    country_code: str | None = None
    postal_code: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    phone_number: str | None = None
    chain_code: str | None = None


class SupplierHotelIn(HotelFields):
    supplier_hotel_id: str | None = None


class SupplierImportRequest(BaseModel):
    """Request body for a supplier batch import."""

    supplier_code: str
    hotels: list[SupplierHotelIn]


class MasterHotelOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    hotel_name: str
    hotel_name_normalized: str
    address_line1: str | None
    city: str | None
    country_code: str | None
    postal_code: str | None
    latitude: float | None
    longitude: float | None
    phone_number: str | None
    chain_code: str | None
    status: MasterStatus


class SupplierHotelOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    supplier_code: str
    supplier_hotel_id: str
    hotel_name: str
    address_line1: str | None
    city: str | None
    country_code: str | None
    postal_code: str | None
    latitude: float | None
    longitude: float | None
    mapping_status: MappingStatus
    master_hotel_id: int | None
    mapping_confidence_score: float | None
    mapping_method: str | None
    mapped_at: datetime | None
    version: int


class ImportOutcomeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    supplier_hotel_id: int
    recommended_action: RecommendedAction | None
    mapping_status: MappingStatus
    created: bool
    error: str | None


class RecordErrorOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    index: int
    supplier_hotel_id: str | None
    error: str


class BatchImportResponse(BaseModel):
    imported: int
    failed: int
    by_action: dict[str, int]
    outcomes: list[ImportOutcomeOut]
    errors: list[RecordErrorOut]


class ReviewSummary(BaseModel):
    supplier: SupplierHotelOut
    candidate_count: int


class CandidateOut(BaseModel):
    potential_match_id: int
    master: MasterHotelOut
    match_score: float
    criteria: dict[str, Any]
    status: PotentialMatchStatus


class ReviewDetail(BaseModel):
    supplier: SupplierHotelOut
    candidates: list[CandidateOut]


class ReviewerAction(BaseModel):
    actor: str = Field(min_length=1)
    expected_version: int | None = None


class ConfirmRequest(ReviewerAction):
    master_hotel_id: int


class RejectRequest(ReviewerAction):
    master_hotel_id: int


class CreateMasterRequest(ReviewerAction):
    master: HotelFields


class CreateMasterResponse(BaseModel):
    supplier: SupplierHotelOut
    master: MasterHotelOut


class HistoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    supplier_hotel_id: int
    supplier_code: str
    action: HistoryAction
    old_master_hotel_id: int | None
    new_master_hotel_id: int | None
    confidence_score: float | None
    mapping_method: str | None
    performed_by: str
    performed_at: datetime


def create_app(service: MappingService) -> FastAPI:
    """Create the FastAPI application around a mapping service."""
    app = FastAPI(title="hotelmatch")

    @app.exception_handler(HotelMatchError)
    async def handle_engine_error(request: Request, exc: HotelMatchError) -> JSONResponse:
        status = next(
            (code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)), 500
        )
        log.warning(
            "request_failed",
            path=request.url.path,
            status=status,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        return JSONResponse(status_code=status, content={"detail": str(exc)})

    def _supplier_out(record: Any) -> SupplierHotelOut:
        return SupplierHotelOut.model_validate(record)

    @app.post("/api/suppliers/import")
    def import_suppliers(req: SupplierImportRequest) -> BatchImportResponse:
        """Import a batch of supplier hotels and run automatic matching."""
        if not req.supplier_code.strip():
            raise HTTPException(status_code=400, detail="supplier_code cannot be empty")
        result = service.import_supplier_batch(
            [h.model_dump() for h in req.hotels], supplier_code=req.supplier_code
        )
        return BatchImportResponse(
            imported=result.imported,
            failed=result.failed,
            by_action=result.count_by_action(),
            outcomes=[ImportOutcomeOut.model_validate(o) for o in result.outcomes],
            errors=[RecordErrorOut.model_validate(e) for e in result.errors],
        )

    @app.get("/api/masters")
    def list_masters() -> list[MasterHotelOut]:
        return [MasterHotelOut.model_validate(m) for m in service.list_masters()]

    @app.post("/api/masters")
    def create_master(req: HotelFields) -> MasterHotelOut:
        return MasterHotelOut.model_validate(service.import_master_record(req.model_dump()))

    @app.post("/api/masters/{master_hotel_id}/deactivate")
    def deactivate_master(master_hotel_id: int) -> MasterHotelOut:
        return MasterHotelOut.model_validate(service.deactivate_master(master_hotel_id))

    @app.get("/api/reviews")
    def list_reviews(
        supplier_code: str | None = None,
        country_code: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[ReviewSummary]:
        """Pending-review supplier hotels, most candidates first."""
        reviews = service.list_pending_reviews(
            supplier_code=supplier_code,
            country_code=country_code,
            limit=limit,
            offset=offset,
        )
        return [
            ReviewSummary(supplier=_supplier_out(r.supplier), candidate_count=r.candidate_count)
            for r in reviews
        ]

    @app.get("/api/reviews/{supplier_hotel_id}")
    def get_review(supplier_hotel_id: int, include_resolved: bool = False) -> ReviewDetail:
        supplier = service.get_supplier(supplier_hotel_id)
        ranked = service.get_potential_matches(supplier_hotel_id, include_resolved=include_resolved)
        return ReviewDetail(
            supplier=_supplier_out(supplier),
            candidates=[
                CandidateOut(
                    potential_match_id=c.potential_match.id,
                    master=MasterHotelOut.model_validate(c.master),
                    match_score=c.potential_match.match_score,
                    criteria=c.potential_match.criteria.to_dict(),
                    status=c.potential_match.status,
                )
                for c in ranked
            ],
        )

    @app.post("/api/reviews/{supplier_hotel_id}/confirm")
    def confirm(supplier_hotel_id: int, req: ConfirmRequest) -> SupplierHotelOut:
        return _supplier_out(service.confirm_match(
            supplier_hotel_id, req.master_hotel_id, req.actor, req.expected_version
        ))

    @app.post("/api/reviews/{supplier_hotel_id}/reject")
    def reject(supplier_hotel_id: int, req: RejectRequest) -> SupplierHotelOut:
        return _supplier_out(service.reject_match(
            supplier_hotel_id, req.master_hotel_id, req.actor, req.expected_version
        ))

    @app.post("/api/reviews/{supplier_hotel_id}/no-match")
    def no_match(supplier_hotel_id: int, req: ReviewerAction) -> SupplierHotelOut:
        return _supplier_out(service.mark_no_match(
            supplier_hotel_id, req.actor, req.expected_version
        ))

    @app.post("/api/reviews/{supplier_hotel_id}/create-master")
    def create_master_and_map(supplier_hotel_id: int, req: CreateMasterRequest) -> CreateMasterResponse:
        supplier, master = service.create_master_and_map(
            supplier_hotel_id, req.master.model_dump(), req.actor, req.expected_version
        )
        return CreateMasterResponse(
            supplier=_supplier_out(supplier),
            master=MasterHotelOut.model_validate(master),
        )

    @app.get("/api/stats")
    def stats() -> dict[str, Any]:
        return service.get_mapping_statistics()

    @app.get("/api/export")
    def export(
        supplier_code: str | None = None,
        status: str | None = None,
        format: str = "csv",
    ) -> Response:
        """Flat mapping table as CSV (default) or JSON rows."""
        rows = service.export_mappings(supplier_code=supplier_code, status=status)
        if format == "json":
            return JSONResponse(content=rows)
        if format != "csv":
            raise HTTPException(status_code=400, detail=f"unsupported export format: {format}")
        body = mappings_dataframe(rows).to_csv(index=False)
        return Response(
            content=body,
            media_type="text/csv",
            headers={"Content-Disposition": 'attachment; filename="hotel_mappings.csv"'},
        )

    @app.get("/api/suppliers/{supplier_hotel_id}/history")
    def history(supplier_hotel_id: int) -> list[HistoryOut]:
        return [HistoryOut.model_validate(h) for h in service.get_mapping_history(supplier_hotel_id)]

    return app
