"""Hospital Markets Dashboard.

Cross-filtered view of regional county spend, hospital quality and
per-hospital procedure mix, driven by one shared selection.
"""

from hospital_markets.config import Settings
from hospital_markets.models import (
    CountyRecord,
    DashboardState,
    FilterState,
    HospitalRecord,
    ProcedureShareRecord,
    SelectionState,
)

__version__ = "0.1.0"
__all__ = [
    "Settings",
    "CountyRecord",
    "HospitalRecord",
    "ProcedureShareRecord",
    "SelectionState",
    "FilterState",
    "DashboardState",
]
