from __future__ import annotations

import uuid
from typing import Callable, Dict, Optional

from ..usecases.wizard import ReservationWizard

WizardFactory = Callable[[str], ReservationWizard]


class InMemoryWizardStore:
    """
    Wizard sessions held in process memory, keyed by an opaque session id.

    At most `max_sessions` are kept; creating one more evicts the oldest.
    """

    def __init__(self, factory: WizardFactory, max_sessions: int = 1000) -> None:
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self._factory = factory
        self._max_sessions = max_sessions
        self._sessions: Dict[str, ReservationWizard] = {}

    def create(self) -> tuple[str, ReservationWizard]:
        while len(self._sessions) >= self._max_sessions:
            # dicts keep insertion order, so the first key is the oldest session
            self.discard(next(iter(self._sessions)))
        session_id = uuid.uuid4().hex
        wizard = self._factory(session_id)
        self._sessions[session_id] = wizard
        return session_id, wizard

    def get(self, session_id: str) -> Optional[ReservationWizard]:
        return self._sessions.get(session_id)

    def discard(self, session_id: str) -> bool:
        wizard = self._sessions.pop(session_id, None)
        if wizard is None:
            return False
        wizard.reset()
        return True

    def __len__(self) -> int:
        return len(self._sessions)
