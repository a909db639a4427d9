"""
Error taxonomy for the signoff workflow.

Every error is a precondition violation the caller can recover from by fixing
its inputs or running a prerequisite operation first. Each class carries a
stable ``code`` that the operation surface reports back to callers.
"""

from typing import Optional


class SignoffError(Exception):
    """Base exception for all signoff errors."""

    code = "SignoffError"

    def __init__(self, message: str, remediation: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.remediation = remediation

    def __str__(self) -> str:
        if self.remediation:
            return f"{self.message}\nTo fix: {self.remediation}"
        return self.message


class GovernanceNotConfigured(SignoffError):
    code = "GovernanceNotConfigured"

    def __init__(self):
        super().__init__(
            "Governance not configured.",
            remediation="Run setup_governance first.",
        )


class InvalidGovernance(SignoffError):
    code = "InvalidGovernance"


class InitiativeAlreadyExists(SignoffError):
    code = "InitiativeAlreadyExists"

    def __init__(self, key: str):
        self.key = key
        super().__init__(
            f"Initiative {key} already exists.",
            remediation="Use advance to continue it.",
        )


class InitiativeNotFound(SignoffError):
    code = "InitiativeNotFound"

    def __init__(self, key: str):
        self.key = key
        super().__init__(
            f"Initiative {key} not found.",
            remediation="Create it with new_initiative first.",
        )


class InvalidInitiativeKey(SignoffError):
    code = "InvalidInitiativeKey"

    def __init__(self, key: str):
        self.key = key
        super().__init__(
            f"Invalid initiative key '{key}'.",
            remediation="Use letters, digits, '.', '_' or '-', starting with a letter or digit.",
        )


class UnknownStep(SignoffError):
    """The persisted current step is not a catalog entry.

    The initiative cannot progress until its state is repaired externally.
    """

    code = "UnknownStep"

    def __init__(self, step: str, key: str = ""):
        self.step = step
        self.key = key
        super().__init__(
            f"Unknown step: {step}" + (f" (initiative: {key})" if key else ""),
            remediation="Repair current_step in the initiative's state.yaml.",
        )


class UnknownArtifact(SignoffError):
    code = "UnknownArtifact"

    def __init__(self, artifact: str, valid: tuple[str, ...] = ()):
        self.artifact = artifact
        message = f"Unknown artifact: {artifact}."
        if valid:
            message += f" Valid: {', '.join(valid)}"
        super().__init__(message)


class StepNotStarted(SignoffError):
    code = "StepNotStarted"

    def __init__(self, key: str, step: str):
        self.key = key
        self.step = step
        super().__init__(
            f"Step {step} of initiative {key} has not been started.",
            remediation="Run advance to generate the artifact before completing the step.",
        )


class InitiativeComplete(SignoffError):
    code = "InitiativeComplete"

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Initiative {key} is already complete.")


class InvalidTicketGroup(SignoffError):
    code = "InvalidTicketGroup"

    def __init__(self, artifact: str, groups: list[str]):
        self.artifact = artifact
        self.groups = groups
        super().__init__(
            f"Groups {', '.join(groups)} do not sign off on {artifact}."
        )


class CorruptState(SignoffError):
    """A persisted document could not be parsed or failed schema validation."""

    code = "CorruptState"

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(
            f"Corrupt document {path}: {reason}",
            remediation="Repair or restore the document; it is never reset to defaults.",
        )


class ConcurrentModification(SignoffError):
    code = "ConcurrentModification"

    def __init__(self, key: str, expected: int, found: int):
        self.key = key
        self.expected = expected
        self.found = found
        super().__init__(
            f"Initiative {key} was modified concurrently "
            f"(expected revision {expected}, found {found}).",
            remediation="Reload the initiative and retry the operation.",
        )


class LockTimeout(SignoffError):
    """Lock acquisition timed out."""

    code = "LockTimeout"
