"""Daily progress computed from a user's goals and meals."""

from dataclasses import dataclass

from caltrack.domain.models import User


@dataclass(frozen=True)
class GoalProgress:
    """Progress of one nutrient against its daily goal."""

    current: int
    goal: int

    @property
    def fraction(self) -> float:
        """Share of the goal reached, capped at 1.0."""
        if self.goal <= 0:
            return 0.0
        return min(self.current, self.goal) / self.goal

    @property
    def percentage(self) -> int:
        """Uncapped percentage of the goal, truncated to an integer."""
        if self.goal <= 0:
            return 0
        return int(self.current / self.goal * 100)


@dataclass(frozen=True)
class DailyProgress:
    """Consumed totals and goal progress for a user."""

    calories: GoalProgress
    carbs: GoalProgress
    fat: GoalProgress
    protein: GoalProgress

    @property
    def remaining_calories(self) -> int:
        """Calories left before the goal is met."""
        return max(self.calories.goal - self.calories.current, 0)

    @property
    def goal_reached(self) -> bool:
        """True once consumed calories meet the calorie goal."""
        return self.calories.current >= self.calories.goal


def compute_progress(user: User) -> DailyProgress:
    """Sum a user's meals against each of their goals."""
    return DailyProgress(
        calories=GoalProgress(
            current=sum(meal.calories for meal in user.meals),
            goal=user.calorie_goal,
        ),
        carbs=GoalProgress(
            current=sum(meal.carbs for meal in user.meals), goal=user.carbs_goal
        ),
        fat=GoalProgress(
            current=sum(meal.fat for meal in user.meals), goal=user.fat_goal
        ),
        protein=GoalProgress(
            current=sum(meal.protein for meal in user.meals),
            goal=user.protein_goal,
        ),
    )
