"""Depreciation routes."""

from fastapi import APIRouter, Depends, Header, HTTPException

from src.api.deps import get_service
from src.api.routes.anlage_v import afa_to_response
from src.api.schemas import AfaCalculateRequest, AfaResponse
from src.data.anlage_v_service import AnlageVService
from src.data.base import ScopeNotFoundError
from src.engine.depreciation import calculate_afa_for_year, default_afa_rate
from src.models.afa import AfaSettings

router = APIRouter(prefix="/api/v1", tags=["afa"])


@router.post("/afa/calculate", response_model=AfaResponse)
async def calculate_afa(req: AfaCalculateRequest):
    """Depreciation for one year from inline settings."""
    afa = AfaSettings(
        enabled=req.enabled,
        purchase_date=req.purchase_date,
        purchase_price_total=req.purchase_price_total,
        building_share_type=req.building_share_type,
        building_share_value=req.building_share_value,
        usage_type=req.usage_type,
        afa_rate=req.afa_rate if req.afa_rate is not None else default_afa_rate(req.usage_type),
        ownership_share=req.ownership_share,
        construction_year=req.construction_year,
    )
    return afa_to_response(calculate_afa_for_year(afa, req.year))


@router.get("/properties/{property_id}/afa-setup")
async def afa_setup(
    property_id: str,
    x_user_id: str = Header(...),
    service: AnlageVService = Depends(get_service),
):
    """Missing AfA inputs and proposed defaults for a stored property."""
    try:
        status = await service.afa_setup_status(x_user_id, property_id)
    except ScopeNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {
        "property_id": status.property_id,
        "is_complete": status.is_complete,
        "missing_fields": list(status.missing_fields),
        "current_values": status.current_values,
        "proposed_defaults": status.proposed_defaults,
    }
