from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from ..domain.wizard import DiagnosisWizard, WizardMode, create_wizard
from ..infrastructure.exceptions import WizardNotFoundError

logger = logging.getLogger(__name__)


class WizardRegistry:
    """
    In-memory holder of the diagnosis wizards that are still in progress.

    Wizards untouched for ``max_idle_seconds`` are evicted whenever a new one is
    created. Completed wizards are discarded by the caller once their final
    state has been reported.
    """

    def __init__(
        self,
        max_idle_seconds: float = 3600,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_idle_seconds = max_idle_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._wizards: dict[str, DiagnosisWizard] = {}
        self._last_seen: dict[str, float] = {}

    def create(self, mode: WizardMode | str, default_program_id: str) -> DiagnosisWizard:
        wizard = create_wizard(mode, default_program_id=default_program_id)
        with self._lock:
            now = self._clock()
            self._evict_idle(now)
            self._wizards[wizard.id] = wizard
            self._last_seen[wizard.id] = now
        return wizard

    def get(self, wizard_id: str) -> DiagnosisWizard:
        with self._lock:
            wizard = self._wizards.get(wizard_id)
            if wizard is not None:
                self._last_seen[wizard_id] = self._clock()
        if wizard is None:
            raise WizardNotFoundError(wizard_id)
        return wizard

    def discard(self, wizard_id: str) -> None:
        with self._lock:
            self._wizards.pop(wizard_id, None)
            self._last_seen.pop(wizard_id, None)

    def _evict_idle(self, now: float) -> None:
        expired = [
            wizard_id
            for wizard_id, seen in self._last_seen.items()
            if now - seen > self.max_idle_seconds
        ]
        for wizard_id in expired:
            self._wizards.pop(wizard_id, None)
            self._last_seen.pop(wizard_id, None)
        if expired:
            logger.info("Evicted %d idle diagnosis wizards", len(expired))

    def __len__(self) -> int:
        with self._lock:
            return len(self._wizards)
