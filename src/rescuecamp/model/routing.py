"""Directed station pipeline with attribute-based branches."""

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional

from rescuecamp.core.entities import StationId
from rescuecamp.model.survivor import Survivor


def always(survivor: Survivor) -> bool:
    return True


@dataclass(frozen=True)
class Branch:
    """One outgoing edge of a pipeline stage.

    Attributes:
        target: Next station, or None for settlement.
        when: Predicate on the survivor; the first matching branch wins.
    """
    target: Optional[StationId]
    when: Callable[[Survivor], bool] = always


@dataclass
class Pipeline:
    """Routing table for survivors.

    Attributes:
        entry: Branches evaluated when a survivor arrives.
        transitions: Branches evaluated when a station completes service.
    """
    entry: List[Branch]
    transitions: Dict[StationId, List[Branch]] = field(default_factory=dict)

    def validate(self, stations: Iterable[StationId]) -> None:
        """Check every target exists and every station has a way out.

        Raises:
            ValueError: If the pipeline references unknown stations or a
                station has no outgoing branches.
        """
        known = set(stations)
        if not self.entry:
            raise ValueError("Pipeline has no entry branches")
        for sid in known:
            if not self.transitions.get(sid):
                raise ValueError(f"Station {sid.name} has no outgoing branches")
        for source, branches in [(None, self.entry)] + list(self.transitions.items()):
            for branch in branches:
                if branch.target is not None and branch.target not in known:
                    origin = "entry" if source is None else source.name
                    raise ValueError(f"{origin} routes to unknown station {branch.target!r}")

    def first_stage(self, survivor: Survivor) -> Optional[StationId]:
        """Station a newly arrived survivor joins."""
        return self._select(self.entry, survivor, "entry")

    def next_stage(self, survivor: Survivor, completed: StationId) -> Optional[StationId]:
        """Station after `completed`, or None when the survivor settles."""
        return self._select(self.transitions.get(completed, []), survivor, completed.name)

    @staticmethod
    def _select(branches: List[Branch], survivor: Survivor, origin: str) -> Optional[StationId]:
        for branch in branches:
            if branch.when(survivor):
                return branch.target
        raise ValueError(f"No branch from {origin} matches survivor #{survivor.id}")


def default_pipeline() -> Pipeline:
    """Camp pipeline.

    medical (children and injured) -> registration -> communication (adults
    who ask) -> supplies -> accommodation -> child or adult shelter.
    """
    return Pipeline(
        entry=[
            Branch(StationId.MEDICAL, lambda s: s.requires_medical),
            Branch(StationId.REGISTRATION),
        ],
        transitions={
            StationId.MEDICAL: [Branch(StationId.REGISTRATION)],
            StationId.REGISTRATION: [
                Branch(StationId.COMMUNICATION, lambda s: s.requests_communication),
                Branch(StationId.SUPPLIES),
            ],
            StationId.COMMUNICATION: [Branch(StationId.SUPPLIES)],
            StationId.SUPPLIES: [Branch(StationId.ACCOMMODATION)],
            StationId.ACCOMMODATION: [
                Branch(StationId.CHILD_SHELTER, lambda s: s.is_child),
                Branch(StationId.ADULT_SHELTER),
            ],
            StationId.CHILD_SHELTER: [Branch(None)],
            StationId.ADULT_SHELTER: [Branch(None)],
        },
    )
