"""
Explicit dashboard session: the mentee being looked at and its pillars.

Components receive a ``DashboardContext`` instead of reaching for a global
"current mentee"; ``load`` must be called before anything else.
"""

from __future__ import annotations

from ..domain.models import Mentee, Pillar
from ..domain.services import DashboardMetrics, compute_dashboard_metrics
from ..infrastructure.exceptions import GrowUpError, PillarNotFoundError
from ..infrastructure.store import MenteeStore


class DashboardContext:
    def __init__(self, store: MenteeStore):
        self.store = store
        self.mentee: Mentee | None = None
        self.pillars: list[Pillar] = []

    @property
    def is_loaded(self) -> bool:
        return self.mentee is not None

    def load(self, mentee_id: int | None = None) -> Mentee | None:
        """Load the given mentee, or the most recent one when no id is passed."""
        if mentee_id is None:
            self.mentee = self.store.load_latest_mentee()
        else:
            self.mentee = self.store.get_mentee(mentee_id)
        self.pillars = self.store.load_pillars(self.mentee.id) if self.mentee else []
        return self.mentee

    def refresh(self) -> None:
        self.load(self._require().id)

    def _require(self) -> Mentee:
        if self.mentee is None:
            raise GrowUpError(
                "Dashboard context used before a mentee was loaded",
                user_message="No diagnosis found. Please complete the diagnosis first.",
            )
        return self.mentee

    def metrics(self) -> DashboardMetrics:
        self._require()
        return compute_dashboard_metrics(self.pillars)

    def pillar(self, name: str) -> Pillar:
        mentee = self._require()
        for pillar in self.pillars:
            if pillar.name == name:
                return pillar
        raise PillarNotFoundError(mentee.id, name)

    def change_program(self, program_id: str) -> Mentee:
        mentee = self._require()
        self.store.update_mentee_program(mentee.id, program_id)
        mentee.program_id = program_id
        return mentee
