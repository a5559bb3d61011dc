"""
Wizard core — multi-step form state machine.

Provides the step registry, the WizardState state machine, the per-step
StepGate submission wrapper, the StepIndicator progress model, and the
per-user session registry that injects them into handlers.
"""

from .errors import WizardScopeError
from .gate import StepGate
from .indicator import StepIndicator, StepMarker
from .registry import StepDescriptor, StepRegistry
from .sessions import OnboardingSession, WizardSessions
from .state import WizardState

__all__ = [
    "OnboardingSession",
    "StepDescriptor",
    "StepGate",
    "StepIndicator",
    "StepMarker",
    "StepRegistry",
    "WizardScopeError",
    "WizardSessions",
    "WizardState",
]
