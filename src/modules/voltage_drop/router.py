"""
Gerilim Düşümü Hesaplama - API Router

Endpoint'ler:
- POST /api/v1/voltage-drop/calculate       - Tek parça hesap
- POST /api/v1/voltage-drop/calculate-line  - Çok parçalı hat (toplam %e)
"""
from fastapi import APIRouter

from src.modules.auth.dependencies import CurrentUser
from src.modules.voltage_drop.schemas import (
    LineVoltageDropRequest,
    LineVoltageDropResult,
    VoltageDropRequest,
    VoltageDropResult,
)
from src.modules.voltage_drop.service import calculate_line, calculate_voltage_drop

router = APIRouter(prefix="/voltage-drop", tags=["Voltage Drop"])


@router.post(
    "/calculate",
    response_model=VoltageDropResult,
    summary="Gerilim Düşümü Hesapla",
    description="""
Trifaze (380 V) veya monofaze (220 V) devre için gerilim düşümü.

| İletken | Trifaze | Monofaze |
|---------|---------|----------|
| Bakır (K=56) | 0.0124 | 0.074 |
| Alüminyum (K=35) | 0.0198 | 0.1184 |

`%e > 3` ise `is_acceptable = false`.
    """,
)
async def calculate(data: VoltageDropRequest, current_user: CurrentUser) -> VoltageDropResult:
    return calculate_voltage_drop(data)


@router.post(
    "/calculate-line",
    response_model=LineVoltageDropResult,
    summary="Hat Gerilim Düşümü",
)
async def calculate_line_drop(data: LineVoltageDropRequest, current_user: CurrentUser) -> LineVoltageDropResult:
    """Parçaların %e değerleri toplanır (e1 + e2 + e3 ...)."""
    return calculate_line(data)
