"""Per-hospital top procedure (DRG) share view-model."""

from dataclasses import dataclass

from hospital_markets.compute.indexer import DashboardDataset
from hospital_markets.models import DashboardState, ProcedureShareRecord, ViewStatus

NO_SELECTION_MESSAGE = "Pick a hospital (scatter) to see its top DRGs."
NO_DATA_MESSAGE = "No procedure share data for this hospital."


@dataclass(frozen=True)
class ProcedureBar:
    rank: int | None
    procedure_code: str | None
    description: str | None
    share: float | None
    avg_payment: float | None


@dataclass(frozen=True)
class ProcedureViewModel:
    """Bar chart contents for the selected hospital.

    Attributes:
        status: NO_SELECTION, NO_DATA or POPULATED.
        provider_key: Selected provider, if any.
        title: Hospital name, or the provider key when no hospital matches.
        bars: Procedures ascending by rank.
        max_share: Largest share (missing as 0), for axis scaling.
        message: Placeholder text for non-populated variants.
    """

    status: ViewStatus
    provider_key: str | None = None
    title: str | None = None
    bars: tuple[ProcedureBar, ...] = ()
    max_share: float = 0.0
    message: str | None = None


def _rank_key(share: ProcedureShareRecord) -> tuple[bool, int]:
    return share.rank is None, share.rank or 0


def build_procedure_view(
    dataset: DashboardDataset,
    state: DashboardState,
) -> ProcedureViewModel:
    """Build the procedure share view-model for the selected provider.

    Args:
        dataset: Indexed dataset.
        state: Current selection and filters.

    Returns:
        ProcedureViewModel in one of its three variants.
    """
    provider_key = state.selection.provider_key
    if not provider_key:
        return ProcedureViewModel(
            status=ViewStatus.NO_SELECTION,
            message=NO_SELECTION_MESSAGE,
        )

    hospital = dataset.hospital_by_provider.get(provider_key)
    title = hospital.name if hospital is not None and hospital.name else provider_key

    shares = sorted(dataset.shares_by_provider.get(provider_key, ()), key=_rank_key)
    if not shares:
        return ProcedureViewModel(
            status=ViewStatus.NO_DATA,
            provider_key=provider_key,
            title=title,
            message=NO_DATA_MESSAGE,
        )

    bars = tuple(
        ProcedureBar(
            rank=s.rank,
            procedure_code=s.procedure_code,
            description=s.procedure_description,
            share=s.share,
            avg_payment=s.avg_payment,
        )
        for s in shares
    )

    return ProcedureViewModel(
        status=ViewStatus.POPULATED,
        provider_key=provider_key,
        title=title,
        bars=bars,
        max_share=max(b.share or 0.0 for b in bars),
    )
