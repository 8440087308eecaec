"""Potential savings from addressing detected anomalies."""

from ..models import Anomaly, Savings
from .stats import round_half_up

ELECTRICITY_COST_PER_KWH = 0.15  # $
CARBON_INTENSITY = 0.4  # kg CO2 per kWh


def calculate_savings(anomalies: list[Anomaly]) -> Savings:
    """Sum the excess consumption over all anomalies.

    Negative excesses are not clamped and reduce the total.
    """
    if not anomalies:
        return Savings()

    total_excess = sum(a.excess for a in anomalies)

    return Savings(
        energy=round_half_up(total_excess, 1),
        cost=round_half_up(total_excess * ELECTRICITY_COST_PER_KWH, 2),
        carbon=round_half_up(total_excess * CARBON_INTENSITY, 1),
    )
