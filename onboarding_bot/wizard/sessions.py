"""
Wizard sessions — one WizardState per chatting user.

Sessions are created when a user starts onboarding and handed to handlers
explicitly (dispatcher workflow data plus the ActiveWizard filter), never
looked up through module globals. They live in process memory only.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from .errors import WizardScopeError
from .gate import StepGate, SubmitHandler
from .indicator import StepIndicator
from .registry import StepDescriptor, StepRegistry
from .state import WizardState

logger = logging.getLogger(__name__)


@dataclass
class OnboardingSession:
    """A wizard plus the per-user UI state around it."""
    wizard: WizardState
    gates: dict[str, StepGate] = field(default_factory=dict)
    field_index: int = 0
    errors: list[str] = field(default_factory=list)

    def __post_init__(self):
        self.indicator = StepIndicator(self.wizard)
        self.wizard.on_step_enter(self._on_step_enter)

    def _on_step_enter(self, step_id: str) -> None:
        self.field_index = 0
        self.errors = []

    def add_gate(self, step_id: str, on_submit: SubmitHandler | None = None, **options: Any) -> StepGate:
        gate = StepGate(self.wizard, step_id, on_submit, **options)
        self.gates[step_id] = gate
        return gate

    @property
    def gate(self) -> StepGate:
        """Gate of the current step."""
        step_id = self.wizard.current_step.id
        try:
            return self.gates[step_id]
        except KeyError:
            raise WizardScopeError(f"No StepGate registered for step {step_id!r}") from None


class WizardSessions:
    """In-memory registry of active onboarding sessions keyed by Telegram user id."""

    def __init__(self):
        self._sessions: dict[int, OnboardingSession] = {}

    def __contains__(self, user_id: int) -> bool:
        return user_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def start(
        self,
        user_id: int,
        steps: StepRegistry | Sequence[StepDescriptor],
        initial_data: Mapping[str, Any] | None = None,
    ) -> OnboardingSession:
        """Begin a new session, replacing any session the user already had."""
        if user_id in self._sessions:
            logger.info("Restarting onboarding session: user_id=%s", user_id)
        session = OnboardingSession(wizard=WizardState(steps, initial_data))
        self._sessions[user_id] = session
        logger.info("Onboarding session started: user_id=%s, steps=%s", user_id, session.wizard.steps.ids)
        return session

    def get(self, user_id: int) -> OnboardingSession | None:
        return self._sessions.get(user_id)

    def require(self, user_id: int) -> OnboardingSession:
        """Session for ``user_id``; raises WizardScopeError if there is none."""
        session = self._sessions.get(user_id)
        if session is None:
            raise WizardScopeError(f"No active onboarding wizard for user {user_id}")
        return session

    def discard(self, user_id: int) -> None:
        if self._sessions.pop(user_id, None) is not None:
            logger.info("Onboarding session closed: user_id=%s", user_id)
