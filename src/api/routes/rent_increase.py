"""Rent increase routes: 15-month lock and Kappungsgrenze headroom."""

from fastapi import APIRouter, Depends, Header, HTTPException

from src.api.deps import get_service
from src.api.schemas import DeliveryTimingResponse, HeadroomRequest, HeadroomResponse
from src.data.anlage_v_service import AnlageVService
from src.data.base import ContractNotFoundError
from src.engine.rent_cap import compute_delivery_timing, compute_rent_increase_headroom
from src.models.rental import Contract, RateChangeEvent
from src.models.results import DeliveryTiming, RentIncreaseHeadroom

router = APIRouter(prefix="/api/v1", tags=["rent-increase"])


def _headroom_to_response(headroom: RentIncreaseHeadroom, timing: DeliveryTiming | None) -> HeadroomResponse:
    delivery = None
    if timing is not None:
        delivery = DeliveryTimingResponse(
            timing_status=timing.timing_status.value,
            next_earliest_effective_from=timing.next_earliest_effective_from,
            service_window_start=timing.service_window_start,
            service_window_end=timing.service_window_end,
            next_effective_if_sent_today=timing.next_effective_if_sent_today,
        )
    return HeadroomResponse(
        lock_status=headroom.lock_status.value,
        possible_since=headroom.possible_since,
        lock_until_date=headroom.lock_until_date,
        current_cold_rent=headroom.current_cold_rent,
        cap_applies=headroom.cap_applies,
        remaining_percent=headroom.remaining_percent,
        max_allowed_rent=headroom.max_allowed_rent,
        delta=headroom.delta,
        baseline_rent=headroom.baseline_rent,
        already_increased_percent=headroom.already_increased_percent,
        delivery_timing=delivery,
    )


@router.post("/rent-increase/headroom", response_model=HeadroomResponse)
async def rent_increase_headroom(req: HeadroomRequest):
    """Headroom for a contract supplied in the request body."""
    contract = Contract(
        id=req.contract_id,
        property_id="",
        unit_id=None,
        tenant_id=None,
        cold_rent=req.cold_rent,
        utility_advance=req.utility_advance,
        start_date=req.start_date,
        rent_regime=req.rent_regime,
    )
    history = [
        RateChangeEvent(
            id=h.id,
            contract_id=contract.id,
            effective_date=h.effective_date,
            cold_rent=h.cold_rent,
            utility_advance=h.utility_advance,
            reason=h.reason,
        )
        for h in req.history
    ]
    headroom = compute_rent_increase_headroom(contract, history, today=req.today, cap_percent=req.cap_percent)
    timing = compute_delivery_timing(headroom.possible_since, today=req.today)
    return _headroom_to_response(headroom, timing)


@router.get("/contracts/{contract_id}/rent-increase", response_model=HeadroomResponse)
async def contract_rent_increase(
    contract_id: str,
    x_user_id: str = Header(...),
    service: AnlageVService = Depends(get_service),
):
    """Headroom for a stored contract and its rent history."""
    try:
        headroom, timing = await service.compute_rent_increase_headroom(x_user_id, contract_id)
    except ContractNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _headroom_to_response(headroom, timing)
