"""Tests for draft validation."""

import pytest

from caltrack.domain.drafts import MealDraft, collect_errors, validate_draft
from caltrack.domain.errors import DraftValidationError
from caltrack.domain.models import Meal


def test_validate_draft_returns_meal() -> None:
    draft = MealDraft(
        name=" Bar ", calories="250", carbs=" 30", fat="6 ", protein="10"
    )

    meal = validate_draft(draft)

    assert meal == Meal(name="Bar", calories=250, carbs=30, fat=6, protein=10)


def test_validate_draft_reports_every_failing_field() -> None:
    draft = MealDraft(name="   ", calories="abc", carbs="10", fat="-1", protein="")

    with pytest.raises(DraftValidationError) as excinfo:
        validate_draft(draft)

    assert excinfo.value.fields == ["name", "calories", "fat", "protein"]


@pytest.mark.parametrize("value", ["", " ", "1.5", "-3", "+4", "1e3", "٣"])
def test_numeric_fields_reject_non_integers(value: str) -> None:
    draft = MealDraft(name="Soup", calories=value, carbs="1", fat="1", protein="1")

    errors = collect_errors(draft)

    assert [error.field for error in errors] == ["calories"]


def test_empty_draft_fails_on_all_fields() -> None:
    errors = collect_errors(MealDraft.empty())

    assert len(errors) == 5


def test_with_changes_returns_updated_copy() -> None:
    draft = MealDraft.from_values("Bar", 250, 30, 6, 10)

    updated = draft.with_changes(calories="200")

    assert updated.calories == "200"
    assert draft.calories == "250"


def test_meal_equality_uses_all_fields() -> None:
    first = Meal(name="Bar", calories=250, carbs=30, fat=6, protein=10)

    assert first == Meal(name="Bar", calories=250, carbs=30, fat=6, protein=10)
    assert first != Meal(name="Bar", calories=250, carbs=30, fat=6, protein=11)
