"""
Voltage Drop Module - Low-voltage line calculator.
"""
from src.modules.voltage_drop.router import router

__all__ = ["router"]
