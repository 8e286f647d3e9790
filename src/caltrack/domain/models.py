"""Domain models for users and their logged meals."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Meal:
    """A logged meal with integer macros."""

    name: str
    calories: int
    carbs: int
    fat: int
    protein: int

    def to_payload(self) -> dict[str, object]:
        """Serialize the meal for the backend's addMeal endpoint."""
        return {
            "name": self.name,
            "calories": self.calories,
            "protein": self.protein,
            "fat": self.fat,
            "carbs": self.carbs,
        }


@dataclass(frozen=True)
class User:
    """A user with daily goals and meals in log order."""

    id: str
    username: str
    calorie_goal: int
    carbs_goal: int
    fat_goal: int
    protein_goal: int
    meals: tuple[Meal, ...] = field(default_factory=tuple)
