"""Wizard wiring errors."""


class WizardScopeError(RuntimeError):
    """Raised when wizard collaborators are used without an active wizard.

    This signals a composition bug (a step component wired up outside a
    wizard session), never a data condition, so it is not caught anywhere.
    """
