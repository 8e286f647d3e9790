"""Pydantic models for backend and product database payloads."""

from pydantic import BaseModel, ConfigDict, Field

from caltrack.domain.models import Meal, User


class MealPayload(BaseModel):
    """Meal entry as returned by the backend."""

    name: str = Field(min_length=1)
    calories: int = Field(ge=0)
    carbs: int = Field(ge=0)
    fat: int = Field(ge=0)
    protein: int = Field(ge=0)

    def to_domain(self) -> Meal:
        """Convert to an immutable domain meal."""
        return Meal(
            name=self.name,
            calories=self.calories,
            carbs=self.carbs,
            fat=self.fat,
            protein=self.protein,
        )


class UserPayload(BaseModel):
    """User record as returned by the backend."""

    id: str = Field(alias="_id")
    username: str
    calorie_goal: int = Field(alias="calorieGoal", ge=0)
    carbs_goal: int = Field(alias="carbsGoal", ge=0)
    fat_goal: int = Field(alias="fatGoal", ge=0)
    protein_goal: int = Field(alias="proteinGoal", ge=0)
    meals: list[MealPayload]

    def to_domain(self) -> User:
        """Convert to an immutable domain user."""
        return User(
            id=self.id,
            username=self.username,
            calorie_goal=self.calorie_goal,
            carbs_goal=self.carbs_goal,
            fat_goal=self.fat_goal,
            protein_goal=self.protein_goal,
            meals=tuple(meal.to_domain() for meal in self.meals),
        )


class Nutriments(BaseModel):
    """Per-100g nutriment values from the product database."""

    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    energy_kcal_100g: float | None = Field(default=None, alias="energy-kcal_100g")
    carbohydrates_100g: float | None = None
    proteins_100g: float | None = None
    fat_100g: float | None = None


class ProductPayload(BaseModel):
    """Product section of a product database response."""

    nutriments: Nutriments = Field(default_factory=Nutriments)
    product_name: str | None = None


class ProductResponse(BaseModel):
    """Top-level product database response."""

    status: int
    product: ProductPayload | None = None

    def is_found(self) -> bool:
        """Return True when the response carries a product."""
        return self.status == 1 and self.product is not None
