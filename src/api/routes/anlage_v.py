"""Anlage V routes: annual rental income summary per property or unit."""

from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, Header, HTTPException, Query

from src.api.deps import get_service
from src.api.schemas import (
    AfaResponse,
    AnlageVResponse,
    ExpenseLineResponse,
    IncomeLineResponse,
)
from src.data.anlage_v_service import AnlageVService
from src.models.rental import ScopeType
from src.models.results import AnlageVSummary, SummaryErrorKind

router = APIRouter(prefix="/api/v1", tags=["anlage-v"])


def afa_to_response(afa) -> AfaResponse:
    return AfaResponse(
        afa_amount=afa.afa_amount,
        annual_afa_full=afa.annual_afa_full,
        months_factor=afa.months_factor,
        building_value_amount=afa.building_value_amount,
        afa_rate=afa.afa_rate,
        ownership_share=afa.ownership_share,
        enabled=afa.enabled,
    )


def _summary_to_response(summary: AnlageVSummary) -> AnlageVResponse:
    incomes = [
        IncomeLineResponse(
            id=line.id,
            date=line.date,
            amount=line.amount,
            source_type=line.source_type,
            contract_id=line.contract_id,
            payment_id=line.payment_id,
            synthesized=line.synthesized,
            tenant_name=line.tenant_name,
            contract_info=line.contract_info,
            property_name=line.property_name,
            unit_number=line.unit_number,
        )
        for line in summary.incomes
    ]
    expenses = [
        ExpenseLineResponse(
            id=line.id,
            date=line.date,
            amount=line.amount,
            category=line.category,
            anlage_v_group=line.anlage_v_group,
            vendor=line.vendor,
            note=line.note,
            property_name=line.property_name,
            unit_number=line.unit_number,
            document_id=line.document_id,
            synthesized=line.synthesized,
            requires_receipt=line.requires_receipt,
        )
        for line in summary.expenses
    ]
    return AnlageVResponse(
        year=summary.year,
        scope_type=summary.scope_type.value,
        scope_id=summary.scope_id,
        scope_label=summary.scope_label,
        ownership_share=summary.ownership_share,
        income_total=summary.income_total,
        expense_total=summary.expense_total,
        afa_total=summary.afa_total,
        result_total=summary.result_total,
        income_breakdown=dict(summary.income_breakdown),
        expense_breakdown=dict(summary.expense_breakdown),
        incomes=incomes,
        expenses=expenses,
        afa=afa_to_response(summary.afa),
        missing_receipts_count=summary.missing_receipts_count,
        backfilled_months_count=summary.backfilled_months_count,
    )


@router.get("/anlage-v/{scope_type}/{scope_id}", response_model=AnlageVResponse)
async def get_anlage_v(
    scope_type: ScopeType,
    scope_id: str,
    year: int = Query(..., ge=1900, le=2200),
    ownership_share: Decimal = Query(Decimal("100"), ge=0, le=100),
    as_of: date | None = Query(None, description="Do not backfill months starting after this date"),
    x_user_id: str = Header(...),
    service: AnlageVService = Depends(get_service),
):
    """Compute the Anlage V summary for a property or a single unit."""
    outcome = await service.compute_annual_summary(
        x_user_id, scope_type, scope_id, year, ownership_share=ownership_share, as_of=as_of,
    )
    if outcome.error is not None:
        if outcome.error.kind == SummaryErrorKind.NOT_FOUND:
            raise HTTPException(status_code=404, detail=outcome.error.message)
        raise HTTPException(status_code=503, detail="Rental data unavailable")
    return _summary_to_response(outcome.summary)
