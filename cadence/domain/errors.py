from __future__ import annotations


class CadenceError(Exception):
    """Base class for recurrence engine and service errors."""


class InvalidRuleError(CadenceError):
    """Recurrence configuration cannot be expanded into occurrences."""

    def __init__(self, message: str, template_id: str | None = None) -> None:
        self.template_id = template_id
        super().__init__(message)


class RangeError(CadenceError):
    """Requested date window ends before it starts."""


class InvalidOverrideError(CadenceError):
    """Override names a field that cannot be set per occurrence, or gives it a bad value."""


class InvalidTransitionError(CadenceError):
    def __init__(self, current: str, target: str) -> None:
        self.current = current
        self.target = target
        super().__init__(f"Cannot move task from {current} to {target}")


class TemplateValidationError(CadenceError):
    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__(", ".join(self.errors))


class NotFoundError(CadenceError):
    pass
