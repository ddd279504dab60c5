"""Domain errors raised by validators and write paths."""

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class FieldError:
    """A single violated constraint on a single field."""

    field: str
    constraint: str
    message: str


class ValidationError(Exception):
    """A candidate record was rejected before persistence."""

    def __init__(self, errors: list[FieldError]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(f"{e.field}: {e.message}" for e in self.errors))

    @classmethod
    def single(cls, field: str, constraint: str, message: str) -> "ValidationError":
        return cls([FieldError(field, constraint, message)])

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": False,
            "message": "Validation Error",
            "errors": [asdict(e) for e in self.errors],
        }


class BookingConflictError(Exception):
    """The requested window overlaps one or more active bookings of the same space."""

    def __init__(self, space: str, conflicts: list[dict[str, Any]]) -> None:
        self.space = space
        self.conflicts = conflicts
        super().__init__(f"Space {space} already booked for the requested window")

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": False,
            "message": "This time slot is already booked. Please choose a different time.",
            "conflicts": self.conflicts,
        }
