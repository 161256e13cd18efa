from typing import Iterable

from attrs import define


@define(slots=True, frozen=True)
class ValidationError:
    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class ConfigurationError(ValueError):
    """Raised when an environment configuration cannot be deployed.

    Carries every field-level defect found, so a single run reports all of
    them instead of one per attempt.
    """

    def __init__(self, errors: Iterable[ValidationError]) -> None:
        self.errors: tuple[ValidationError, ...] = tuple(errors)
        super().__init__(
            "Invalid environment configuration: "
            + "; ".join(str(error) for error in self.errors)
        )

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(error.field for error in self.errors)
