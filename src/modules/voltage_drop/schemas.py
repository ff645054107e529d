"""
Voltage Drop Module - Pydantic Schemas
"""
from enum import Enum

from pydantic import BaseModel, Field


class CircuitType(str, Enum):
    TRIFAZE = "TRIFAZE"  # Üç faz, 380 V
    MONOFAZE = "MONOFAZE"  # Tek faz, 220 V


class ConductorType(str, Enum):
    COPPER = "COPPER"  # Bakır, K=56
    ALUMINUM = "ALUMINUM"  # Alüminyum, K=35


class VoltageDropRequest(BaseModel):
    """Tek hat parçası için gerilim düşümü girdisi."""
    circuit_type: CircuitType = Field(..., examples=["TRIFAZE"])
    distance: float = Field(..., gt=0, description="Hat mesafesi (m)", examples=[15])
    power: float = Field(..., gt=0, description="Güç (kW)", examples=[8])
    conductor_section: float = Field(..., gt=0, description="İletken kesiti (mm²)", examples=[6])
    conductor_type: ConductorType = Field(ConductorType.COPPER, examples=["COPPER"])


class VoltageDropResult(BaseModel):
    voltage_drop: float = Field(..., description="Gerilim düşümü (V)")
    voltage_drop_percentage: float = Field(..., description="%e")
    formula: str
    is_acceptable: bool = Field(..., description="%e <= 3")


class LineVoltageDropRequest(BaseModel):
    """Birden fazla parçadan oluşan hat (e1 + e2 + ...)."""
    segments: list[VoltageDropRequest] = Field(..., min_length=1, max_length=100)


class LineVoltageDropResult(BaseModel):
    segments: list[VoltageDropResult]
    total_voltage_drop: float
    total_voltage_drop_percentage: float
    is_acceptable: bool
