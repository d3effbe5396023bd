"""View-model builders for the four coordinated views.

Each builder is a pure function of the indexed dataset and the current
state, rerun in full on every state change.
"""

from hospital_markets.views.map_view import (
    Z_SPEND_DOMAIN,
    MapCell,
    MapCellStatus,
    MapViewModel,
    RegionLabel,
    build_map_view,
)
from hospital_markets.views.procedure_view import (
    ProcedureBar,
    ProcedureViewModel,
    build_procedure_view,
)
from hospital_markets.views.ranking_view import (
    RankingRow,
    RankingViewModel,
    build_ranking_view,
)
from hospital_markets.views.scatter_view import (
    ScatterPoint,
    ScatterViewModel,
    build_scatter_view,
    suggest_hospital_names,
)

__all__ = [
    # Map
    "Z_SPEND_DOMAIN",
    "MapCell",
    "MapCellStatus",
    "MapViewModel",
    "RegionLabel",
    "build_map_view",
    # Scatter
    "ScatterPoint",
    "ScatterViewModel",
    "build_scatter_view",
    "suggest_hospital_names",
    # Procedures
    "ProcedureBar",
    "ProcedureViewModel",
    "build_procedure_view",
    # Ranking
    "RankingRow",
    "RankingViewModel",
    "build_ranking_view",
]
