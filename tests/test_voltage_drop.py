"""
Voltage drop calculator tests.
"""
import pytest

from src.modules.voltage_drop.schemas import (
    CircuitType,
    ConductorType,
    LineVoltageDropRequest,
    VoltageDropRequest,
)
from src.modules.voltage_drop.service import calculate_line, calculate_voltage_drop

API = "/api/v1/voltage-drop"


def _segment(distance, power, section=6, circuit=CircuitType.TRIFAZE, conductor=ConductorType.COPPER):
    return VoltageDropRequest(
        circuit_type=circuit,
        distance=distance,
        power=power,
        conductor_section=section,
        conductor_type=conductor,
    )


def test_copper_trifaze():
    result = calculate_voltage_drop(_segment(15, 8))

    assert result.voltage_drop_percentage == pytest.approx(0.248)
    assert result.voltage_drop == pytest.approx(0.248 * 380 / 100)
    assert result.is_acceptable
    assert "0.0124 * 15 * 8 / 6" in result.formula
    assert "(56*S(mm²))" in result.formula


def test_aluminum_monofaze():
    result = calculate_voltage_drop(
        _segment(10, 2, section=4, circuit=CircuitType.MONOFAZE, conductor=ConductorType.ALUMINUM)
    )

    assert result.voltage_drop_percentage == pytest.approx(0.592)
    assert result.voltage_drop == pytest.approx(0.592 * 220 / 100)
    assert "35" in result.formula


def test_drop_above_three_percent_is_not_acceptable():
    result = calculate_voltage_drop(_segment(100, 20, section=2.5))
    assert result.voltage_drop_percentage == pytest.approx(9.92)
    assert not result.is_acceptable


def test_line_sums_segments():
    result = calculate_line(
        LineVoltageDropRequest(segments=[_segment(15, 8), _segment(5, 8), _segment(15, 7)])
    )

    assert len(result.segments) == 3
    assert result.total_voltage_drop_percentage == pytest.approx(0.248 + 0.0124 * 5 * 8 / 6 + 0.217)
    assert result.is_acceptable


@pytest.mark.asyncio
async def test_calculate_endpoint(client, auth_headers):
    response = await client.post(
        f"{API}/calculate",
        json={
            "circuit_type": "TRIFAZE",
            "distance": 15,
            "power": 8,
            "conductor_section": 6,
            "conductor_type": "COPPER",
        },
        headers=auth_headers,
    )
    assert response.status_code == 200
    assert response.json()["voltage_drop_percentage"] == pytest.approx(0.248)


@pytest.mark.asyncio
async def test_calculate_rejects_non_positive_input(client, auth_headers):
    response = await client.post(
        f"{API}/calculate",
        json={"circuit_type": "TRIFAZE", "distance": 0, "power": 8, "conductor_section": 6},
        headers=auth_headers,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_calculate_line_endpoint(client, auth_headers):
    segment = {"circuit_type": "MONOFAZE", "distance": 10, "power": 2, "conductor_section": 4}
    response = await client.post(
        f"{API}/calculate-line",
        json={"segments": [segment, segment]},
        headers=auth_headers,
    )
    assert response.status_code == 200
    assert response.json()["total_voltage_drop_percentage"] == pytest.approx(2 * 0.074 * 10 * 2 / 4)


@pytest.mark.asyncio
async def test_calculate_requires_auth(client):
    response = await client.post(f"{API}/calculate", json={})
    assert response.status_code == 401
