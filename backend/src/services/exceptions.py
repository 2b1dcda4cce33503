"""Shared exceptions for service layer operations."""


class PromptActionError(Exception):
    """
    Base class for failures of a prompt mutation action.

    The message is plain, human-readable text. The prompt grid shows it inline
    as-is, so it must never leak whether another user's record exists.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class PromptNotFoundError(PromptActionError):
    """
    Raised when a prompt does not exist or is not owned by the caller.

    The two cases are deliberately indistinguishable.
    """

    def __init__(self, prompt_id: int) -> None:
        self.prompt_id = prompt_id
        super().__init__("Prompt not found")


class FieldLimitExceededError(PromptActionError):
    """Raised when a submitted field is longer than its configured limit."""

    def __init__(self, field: str, length: int, limit: int) -> None:
        self.field = field
        self.length = length
        self.limit = limit
        super().__init__(
            f"{field.capitalize()} is too long ({length} characters, maximum is {limit})",
        )
