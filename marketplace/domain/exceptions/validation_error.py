"""
Validation-related domain exceptions.
"""


class ValidationError(Exception):
    """Base exception for validation errors."""

    code = "VALIDATION_ERROR"


class RequiredFieldError(ValidationError):
    """Raised when required field is missing."""

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f"Required field '{field_name}' is missing")


class InvalidContractorSelectionError(ValidationError):
    """Raised when a fan-out request names too few or too many contractors."""

    code = "INVALID_CONTRACTOR_SELECTION"

    def __init__(self, count: int, maximum: int):
        self.count = count
        self.maximum = maximum
        super().__init__(
            f"Select between 1 and {maximum} contractors (got {count})"
        )
