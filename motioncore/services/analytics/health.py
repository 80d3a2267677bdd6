"""
Health metrics engine: body weight, BMI, basal metabolic rate and TDEE.

User body data comes from an explicitly passed `UserSettings` row.
"""
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, Optional, Tuple

from motioncore.models.session import CoreSessionMixin
from motioncore.models.types import Gender
from motioncore.models.user_settings import UserSettings


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves away from zero (12.345 -> 12.35)."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class CalorieBalance:
    """Daily calorie balance: burned (basal + active) against consumed."""
    consumed_calories: int
    basal_energy: int
    active_energy: int

    @property
    def total_burned(self) -> int:
        return self.basal_energy + self.active_energy

    @property
    def balance(self) -> int:
        return self.total_burned - self.consumed_calories

    @property
    def is_deficit(self) -> bool:
        return self.balance > 0

    @property
    def consumed_percentage(self) -> float:
        if self.total_burned <= 0:
            return 0.0
        return min(self.consumed_calories / self.total_burned, 1.0)

    @property
    def balance_formatted(self) -> str:
        sign = "+" if self.is_deficit else ""
        return f"{sign}{abs(self.balance)} kcal"

    @property
    def status_text(self) -> str:
        return "Kaloriendefizit" if self.is_deficit else "Kalorienüberschuss"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "consumedCalories": self.consumed_calories,
            "basalEnergy": self.basal_energy,
            "activeEnergy": self.active_energy,
            "totalBurned": self.total_burned,
            "balance": self.balance,
            "isDeficit": self.is_deficit,
            "consumedPercentage": round(self.consumed_percentage, 3),
            "balanceFormatted": self.balance_formatted,
            "statusText": self.status_text,
        }


class HealthMetricCalcEngine:
    """
    Body metrics derived from logged sessions and user settings.

    Args:
        sessions: Sessions of any kind carrying body weight
        user_settings: Height, birthday, gender and activity level
        today: Reference date for the age (defaults to today)
    """

    def __init__(
        self,
        sessions: Iterable[CoreSessionMixin],
        user_settings: UserSettings,
        today: Optional[date] = None,
    ):
        self.sessions: Tuple[CoreSessionMixin, ...] = tuple(sessions)
        self.user_settings = user_settings
        self.today = today or date.today()

    @property
    def user_age(self) -> int:
        return self.user_settings.age(self.today)

    @property
    def user_body_weight(self) -> Optional[float]:
        """Body weight of the most recent session that recorded one."""
        latest: Optional[CoreSessionMixin] = None
        for session in self.sessions:
            if session.body_weight <= 0:
                continue
            if latest is None or session.date > latest.date:
                latest = session
        return latest.body_weight if latest else None

    @property
    def user_body_mass_index(self) -> Optional[float]:
        """BMI rounded to two decimals, None without weight or height."""
        weight = self.user_body_weight
        if weight is None:
            return None
        height_m = self.user_settings.body_height_cm / 100.0
        if height_m <= 0:
            return None
        return round_half_up(weight / (height_m * height_m), 2)

    @property
    def user_basal_metabolic_rate(self) -> Optional[float]:
        """
        Mifflin-St Jeor basal metabolic rate in kcal/day.

        Returns:
            Rounded BMR, or None when weight, height or age is unknown
        """
        weight = self.user_body_weight
        height = self.user_settings.body_height_cm
        age = self.user_age
        if weight is None or weight <= 0 or height <= 0 or age <= 0:
            return None

        bmr = 10.0 * weight + 6.25 * height - 5.0 * age
        if self.user_settings.gender == Gender.FEMALE:
            bmr -= 161.0
        else:
            bmr += 5.0
        return round_half_up(bmr)

    @property
    def user_total_daily_energy_expenditure(self) -> Optional[float]:
        bmr = self.user_basal_metabolic_rate
        if bmr is None:
            return None
        return bmr * self.user_settings.activity_level.factor

    @staticmethod
    def calorie_balance(
        consumed: Optional[int],
        basal: Optional[int],
        active: Optional[int],
    ) -> Optional[CalorieBalance]:
        """Balance for one day, None unless all three readings are present."""
        if consumed is None or basal is None or active is None:
            return None
        return CalorieBalance(consumed_calories=consumed, basal_energy=basal, active_energy=active)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API response."""
        tdee = self.user_total_daily_energy_expenditure
        return {
            "age": self.user_age,
            "bodyWeight": self.user_body_weight,
            "bodyMassIndex": self.user_body_mass_index,
            "basalMetabolicRate": self.user_basal_metabolic_rate,
            "totalDailyEnergyExpenditure": round(tdee, 1) if tdee is not None else None,
            "activityLevel": self.user_settings.activity_level.value,
        }
