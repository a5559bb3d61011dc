"""Step Indicator — progress and jump affordance over a WizardState."""

import logging
from dataclasses import dataclass

from .errors import WizardScopeError
from .registry import StepDescriptor
from .state import WizardState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepMarker:
    index: int
    step: StepDescriptor
    is_active: bool
    is_past: bool
    is_complete: bool

    @property
    def is_clickable(self) -> bool:
        """Past steps and completed steps (even ahead of the current one) can be revisited."""
        return self.is_past or self.is_complete


class StepIndicator:
    def __init__(self, wizard: WizardState | None):
        if wizard is None:
            raise WizardScopeError("StepIndicator must be created inside an active wizard")
        self.wizard = wizard

    def markers(self) -> list[StepMarker]:
        current = self.wizard.current_step_index
        return [
            StepMarker(
                index=index,
                step=step,
                is_active=index == current,
                is_past=index < current,
                is_complete=self.wizard.is_step_complete(step.id),
            )
            for index, step in enumerate(self.wizard.steps)
        ]

    def progress(self) -> float:
        """Fill fraction ``current / (total - 1)``; 0.0 for a single-step wizard."""
        total = len(self.wizard.steps)
        if total <= 1:
            return 0.0
        return self.wizard.current_step_index / (total - 1)

    def select(self, index: int) -> bool:
        """Jump to ``index`` if its marker is clickable and not already active."""
        markers = self.markers()
        if not 0 <= index < len(markers):
            return False
        marker = markers[index]
        if marker.is_active or not marker.is_clickable:
            logger.debug("Indicator jump to step %s refused", marker.step.id)
            return False
        return self.wizard.go_to_step(index)
