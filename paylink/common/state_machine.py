"""Pay link form state transitions enforced by the submission client."""

from enum import Enum


class FormStatus(str, Enum):
    IDLE = "IDLE"
    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


ALLOWED_TRANSITIONS: dict[FormStatus, set[FormStatus]] = {
    FormStatus.IDLE: {FormStatus.PENDING},
    FormStatus.PENDING: {FormStatus.SUCCESS, FormStatus.ERROR},
    FormStatus.ERROR: {FormStatus.PENDING, FormStatus.IDLE},
    FormStatus.SUCCESS: set(),
}


def validate_transition(current: FormStatus, new: FormStatus) -> None:
    """Raise when a transition is not allowed by the state machine."""

    if new not in ALLOWED_TRANSITIONS.get(current, set()):
        raise ValueError(f"Invalid transition: {current.value} -> {new.value}")
