"""Daily macro aggregation."""

from datetime import date, datetime

from keto_tracker.domain.macros import DailyMacros
from keto_tracker.domain.meals import Meal
from keto_tracker.domain.nutrition import DEFAULT_MACRO_LIMIT, Macro
from keto_tracker.domain.profile import UserProfile


def compute_daily_macros(
    meals: list[Meal], target_date: date, profile: UserProfile | None
) -> DailyMacros:
    """Return totals, limit and remaining budget for ``target_date``.

    Meals whose date cannot be parsed are skipped.
    """
    meals_for_day = [meal for meal in meals if _meal_day(meal) == target_date]
    total = _sum_macros(meals_for_day)
    limit = profile.daily_macro_limit if profile else DEFAULT_MACRO_LIMIT
    return DailyMacros(
        date=target_date.isoformat(),
        total=total,
        limit=limit,
        remaining=remaining_macros(total, limit),
        meals=meals_for_day,
    )


def remaining_macros(total: Macro, limit: Macro) -> Macro:
    """Return the per-field budget left, floored at zero."""
    return Macro(
        carbs=max(0.0, limit.carbs - total.carbs),
        protein=max(0.0, limit.protein - total.protein),
        fat=max(0.0, limit.fat - total.fat),
        calories=max(0.0, limit.calories - total.calories),
    )


def parse_day(raw: object) -> date | None:
    """Parse an ISO date or timestamp into its calendar day."""
    if not isinstance(raw, str) or not raw:
        return None
    try:
        return datetime.fromisoformat(raw).date()
    except ValueError:
        return None


def _meal_day(meal: Meal) -> date | None:
    return parse_day(meal.date)


def _sum_macros(meals: list[Meal]) -> Macro:
    total = Macro()
    for meal in meals:
        total = Macro(
            carbs=total.carbs + meal.macros.carbs,
            protein=total.protein + meal.macros.protein,
            fat=total.fat + meal.macros.fat,
            calories=total.calories + meal.macros.calories,
        )
    return total
