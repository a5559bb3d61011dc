"""
Step Gate — per-step submission wrapper.

A gate owns one step of a wizard. It is visible only while that step is
current, and on submit it runs the step's validator/saver and, on success,
marks the step complete and advances the wizard.
"""

import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from .errors import WizardScopeError
from .state import WizardState

logger = logging.getLogger(__name__)

SubmitHandler = Callable[[dict[str, Any]], bool | Awaitable[bool]]


class StepGate:
    """
    Mediates one step's submission protocol with a WizardState.

    ``is_submitting`` belongs to the caller: the gate reads it to disable
    back-navigation and the submit control but never sets it.
    """

    def __init__(
        self,
        wizard: WizardState | None,
        step_id: str,
        on_submit: SubmitHandler | None = None,
        *,
        title: str | None = None,
        description: str | None = None,
        next_label: str = "Continue",
        back_label: str = "Back",
        show_back: bool = True,
        is_submitting: bool = False,
    ):
        if wizard is None:
            raise WizardScopeError(f"StepGate({step_id!r}) must be created inside an active wizard")

        self.wizard = wizard
        self.step_id = step_id
        self.on_submit = on_submit
        self.title = title
        self.description = description
        self.next_label = next_label
        self.back_label = back_label
        self.show_back = show_back
        self.is_submitting = is_submitting

    def __repr__(self) -> str:
        return f"StepGate({self.step_id!r}, visible={self.is_visible})"

    @property
    def is_visible(self) -> bool:
        return self.wizard.current_step.id == self.step_id

    @property
    def can_go_back(self) -> bool:
        return self.show_back and not self.wizard.is_first_step and not self.is_submitting

    @property
    def can_submit(self) -> bool:
        return not self.is_submitting

    @property
    def submit_label(self) -> str:
        return "Complete" if self.wizard.is_last_step else self.next_label

    @property
    def display_title(self) -> str:
        return self.title or self.wizard.current_step.title

    @property
    def display_description(self) -> str:
        return self.description or self.wizard.current_step.description

    def go_back(self) -> bool:
        """Navigate to the previous step unless back is disabled."""
        if not self.can_go_back:
            logger.debug("Back ignored on step %s (submitting=%s)", self.step_id, self.is_submitting)
            return False
        return self.wizard.go_to_previous_step()

    async def submit(self) -> bool:
        """
        Run the step's submit handler and advance on success.

        Returns:
            True if the step was completed and the wizard advanced. False if
            the handler rejected the data or raised; the step then stays
            active with its state unchanged.
        """
        if not self.is_visible:
            logger.warning("Submit ignored: step %s is not the active step", self.step_id)
            return False

        try:
            if self.on_submit is not None:
                accepted = await self._call_handler(self.wizard.form_data)
                if not accepted:
                    logger.info("Step %s submission rejected", self.step_id)
                    return False
        except Exception:
            logger.exception("Form submission error on step %s", self.step_id)
            return False

        self.wizard.mark_step_complete(self.step_id)
        self.wizard.go_to_next_step()
        logger.info("Step %s completed", self.step_id)
        return True

    async def _call_handler(self, form_data: Mapping[str, Any]) -> bool:
        result = self.on_submit(dict(form_data))
        if inspect.isawaitable(result):
            result = await result
        return bool(result)
