"""Plain-text rendering of store and pipeline state."""

from caltrack.domain.drafts import MealDraft
from caltrack.domain.loading import Loaded, LoadFailed
from caltrack.domain.models import Meal
from caltrack.domain.progress import DailyProgress, GoalProgress
from caltrack.services.ingestion import IngestionState, MealIngestionPipeline
from caltrack.services.store import MealStore


def render_store(store: MealStore) -> str:
    """Render the loading state, progress and meal list."""
    state = store.loading_state
    if isinstance(state, LoadFailed):
        return f"Error: {state.message}\nRun again to retry."
    if not isinstance(state, Loaded):
        return "Loading data..."
    user = store.current_user
    progress = store.progress()
    if user is None or progress is None:
        return "No user data available"
    lines = [f"Welcome, {user.username}", format_progress(progress), "Meals Logged:"]
    lines.append(format_meals(list(user.meals)))
    return "\n".join(lines)


def format_progress(progress: DailyProgress) -> str:
    """Format calorie and macro progress."""
    if progress.goal_reached:
        headline = "Congrats! You've hit your calorie goal for the day"
    else:
        headline = (
            f"You need {progress.remaining_calories} more calories "
            "to reach your goal"
        )
    return "\n".join(
        [
            headline,
            _format_goal("Calories", progress.calories, unit=""),
            _format_goal("Carbs", progress.carbs),
            _format_goal("Fat", progress.fat),
            _format_goal("Protein", progress.protein),
        ]
    )


def format_meals(meals: list[Meal]) -> str:
    """Format logged meals one per line."""
    if not meals:
        return "No meals logged yet."
    return "\n".join(
        f"- {meal.name}: {meal.calories} kcal "
        f"({meal.carbs}C/{meal.fat}F/{meal.protein}P)"
        for meal in meals
    )


def format_draft(draft: MealDraft) -> str:
    """Format a draft for review before confirmation."""
    return (
        f"{draft.name or '(unnamed)'}: calories={draft.calories} "
        f"carbs={draft.carbs} fat={draft.fat} protein={draft.protein}"
    )


def render_pipeline(pipeline: MealIngestionPipeline) -> str:
    """Render the ingestion pipeline's current step."""
    lines = [f"[{pipeline.state.value}]"]
    if pipeline.state is IngestionState.DRAFTING and pipeline.draft is not None:
        lines.append(format_draft(pipeline.draft))
    for field_error in pipeline.field_errors:
        lines.append(f"  ! {field_error.field}: {field_error.message}")
    if pipeline.error:
        lines.append(f"Error: {pipeline.error}")
    if pipeline.state is IngestionState.IDLE and pipeline.last_meal is not None:
        lines.append(f"Last added: {pipeline.last_meal.name}")
    return "\n".join(lines)


def _format_goal(label: str, goal: GoalProgress, unit: str = "g") -> str:
    return f"{label}: {goal.current}/{goal.goal}{unit} ({goal.percentage}%)"
