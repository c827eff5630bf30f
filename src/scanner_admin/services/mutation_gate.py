"""
Mutation gate: which website mutations are allowed right now.

The capability set is a pure function of the scan flag, so every affordance
in a view reads the same answer. Destructive actions additionally need the
operator to confirm.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional

# Blocking yes/no prompt owned by the UI
Confirmer = Callable[[str], bool]


class Action(str, Enum):
    EDIT = "edit"
    DELETE = "delete"
    CLEAR_ERRORS = "clear_errors"
    TOGGLE_ACTIVE = "toggle_active"
    CREATE = "create"


CONFIRMATION_PROMPTS: Dict[Action, str] = {
    Action.DELETE: "Are you sure you want to delete this website?",
    Action.CLEAR_ERRORS: "Are you sure you want to clear all errors for this website?",
}

BLOCKED_REASONS: Dict[Action, str] = {
    Action.EDIT: "Cannot edit during scan",
    Action.DELETE: "Cannot delete during scan",
    Action.CLEAR_ERRORS: "Cannot clear errors during scan",
    Action.TOGGLE_ACTIVE: "Cannot toggle status during scan",
    Action.CREATE: "Cannot add websites during scan",
}


@dataclass(frozen=True)
class Capabilities:
    can_edit: bool
    can_delete: bool
    can_clear_errors: bool
    can_toggle_active: bool
    can_create: bool

    def allows(self, action: Action) -> bool:
        return getattr(self, f"can_{action.value}")

    def blocked_reason(self, action: Action) -> Optional[str]:
        """Tooltip text for a disabled affordance, None when allowed."""
        if self.allows(action):
            return None
        return BLOCKED_REASONS[action]


ALL_ALLOWED = Capabilities(True, True, True, True, True)
NONE_ALLOWED = Capabilities(False, False, False, False, False)


def capabilities_for(is_scanning: bool) -> Capabilities:
    return NONE_ALLOWED if is_scanning else ALL_ALLOWED


def requires_confirmation(action: Action) -> bool:
    return action in CONFIRMATION_PROMPTS


def confirm(action: Action, confirmer: Confirmer) -> bool:
    """Ask the operator to confirm ``action``; non-destructive actions pass straight through."""
    if not requires_confirmation(action):
        return True
    return bool(confirmer(CONFIRMATION_PROMPTS[action]))
