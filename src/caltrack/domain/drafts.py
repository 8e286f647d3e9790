"""Editable meal drafts and their validation."""

from dataclasses import dataclass, replace

from caltrack.domain.errors import DraftValidationError, FieldValidationError
from caltrack.domain.models import Meal

_NUMERIC_FIELDS = ("calories", "protein", "fat", "carbs")


@dataclass(frozen=True)
class MealDraft:
    """Unvalidated meal with numeric fields held as text."""

    name: str = ""
    calories: str = ""
    carbs: str = ""
    fat: str = ""
    protein: str = ""

    @classmethod
    def empty(cls) -> "MealDraft":
        """Return the blank draft used for manual entry."""
        return cls()

    @classmethod
    def from_values(  # noqa: PLR0913
        cls, name: str, calories: int, carbs: int, fat: int, protein: int
    ) -> "MealDraft":
        """Build a prefilled draft from integer macros."""
        return cls(
            name=name,
            calories=str(calories),
            carbs=str(carbs),
            fat=str(fat),
            protein=str(protein),
        )

    def with_changes(self, **changes: str) -> "MealDraft":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)


def collect_errors(draft: MealDraft) -> list[FieldValidationError]:
    """Return every validation failure for a draft, in field order."""
    errors: list[FieldValidationError] = []
    if not draft.name.strip():
        errors.append(FieldValidationError("name", "must not be empty"))
    for field_name in _NUMERIC_FIELDS:
        raw = getattr(draft, field_name)
        if _parse_non_negative_int(raw) is None:
            errors.append(
                FieldValidationError(field_name, "must be a non-negative integer")
            )
    return errors


def validate_draft(draft: MealDraft) -> Meal:
    """Convert a draft into a meal or raise with all failing fields."""
    errors = collect_errors(draft)
    if errors:
        raise DraftValidationError(errors)
    return Meal(
        name=draft.name.strip(),
        calories=int(draft.calories.strip()),
        carbs=int(draft.carbs.strip()),
        fat=int(draft.fat.strip()),
        protein=int(draft.protein.strip()),
    )


def _parse_non_negative_int(value: str) -> int | None:
    cleaned = value.strip()
    if not cleaned.isdigit() or not cleaned.isascii():
        return None
    return int(cleaned)
