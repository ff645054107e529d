"""
Voltage Drop Module - Calculator

Alçak gerilim hatlarında gerilim düşümü:

    %e = katsayı * L(m) * N(kW) / S(mm²)

Katsayılar K (iletkenlik) değerinden türetilmiştir: bakır K=56, alüminyum K=35.
"""
from src.core.logging import get_logger
from src.modules.voltage_drop.schemas import (
    CircuitType,
    ConductorType,
    LineVoltageDropRequest,
    LineVoltageDropResult,
    VoltageDropRequest,
    VoltageDropResult,
)

logger = get_logger(__name__)

COEFFICIENTS: dict[ConductorType, dict[CircuitType, float]] = {
    ConductorType.COPPER: {CircuitType.TRIFAZE: 0.0124, CircuitType.MONOFAZE: 0.074},
    ConductorType.ALUMINUM: {CircuitType.TRIFAZE: 0.0198, CircuitType.MONOFAZE: 0.1184},
}

CONDUCTIVITY: dict[ConductorType, int] = {
    ConductorType.COPPER: 56,
    ConductorType.ALUMINUM: 35,
}

BASE_VOLTAGE: dict[CircuitType, int] = {
    CircuitType.TRIFAZE: 380,
    CircuitType.MONOFAZE: 220,
}

MAX_ACCEPTABLE_DROP_PERCENTAGE = 3.0


def _formula(data: VoltageDropRequest, coefficient: float, percentage: float) -> str:
    k = CONDUCTIVITY[data.conductor_type]
    substituted = (
        f"{coefficient:.4f} * {data.distance:g} * {data.power:g} / {data.conductor_section:g}"
        f" = {percentage:.4f}"
    )
    if data.circuit_type == CircuitType.TRIFAZE:
        return f"%e = (100*L*N) / (K*S*U²) = (10*L*N(kW)) / ({k}*S(mm²)) = {substituted}"
    return f"%e = (200*L*N) / (K*S*U²) = (2*10*L*N(kW)) / ({k}*S(mm²)) = {substituted}"


def calculate_voltage_drop(data: VoltageDropRequest) -> VoltageDropResult:
    """Voltage drop of a single line segment."""
    coefficient = COEFFICIENTS[data.conductor_type][data.circuit_type]
    percentage = coefficient * data.distance * data.power / data.conductor_section
    voltage_drop = percentage * BASE_VOLTAGE[data.circuit_type] / 100

    return VoltageDropResult(
        voltage_drop=voltage_drop,
        voltage_drop_percentage=percentage,
        formula=_formula(data, coefficient, percentage),
        is_acceptable=percentage <= MAX_ACCEPTABLE_DROP_PERCENTAGE,
    )


def calculate_line(data: LineVoltageDropRequest) -> LineVoltageDropResult:
    """Sum of the segment drops along a line."""
    results = [calculate_voltage_drop(segment) for segment in data.segments]
    total_percentage = sum(r.voltage_drop_percentage for r in results)

    logger.debug("Line voltage drop calculated", segments=len(results), total_percentage=total_percentage)
    return LineVoltageDropResult(
        segments=results,
        total_voltage_drop=sum(r.voltage_drop for r in results),
        total_voltage_drop_percentage=total_percentage,
        is_acceptable=total_percentage <= MAX_ACCEPTABLE_DROP_PERCENTAGE,
    )
