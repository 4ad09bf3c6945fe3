"""Conversions between display units and canonical units (kg, cm)."""

from keto_tracker.domain.profile import HeightUnit, WeightUnit

LB_TO_KG = 0.453592
KG_TO_LB = 2.20462
INCH_TO_CM = 2.54
INCHES_PER_FOOT = 12


def weight_to_kg(value: float, unit: WeightUnit) -> float:
    """Convert a user-entered weight to kilograms."""
    if unit == "lb":
        return value * LB_TO_KG
    return value


def weight_from_kg(weight_kg: float, unit: WeightUnit) -> float:
    """Convert a canonical weight into the display unit."""
    if unit == "lb":
        return weight_kg * KG_TO_LB
    return weight_kg


def height_to_cm(value: float, unit: HeightUnit, inches: float = 0.0) -> float:
    """Convert a user-entered height to centimeters.

    For ``ft`` the value is (possibly fractional) feet, with optional extra
    inches.
    """
    if unit == "ft":
        total_inches = value * INCHES_PER_FOOT + inches
        return total_inches * INCH_TO_CM
    return value


def height_from_cm(height_cm: float) -> tuple[int, int]:
    """Split a canonical height into whole feet and inches."""
    total_inches = height_cm / INCH_TO_CM
    feet = int(total_inches // INCHES_PER_FOOT)
    inches = round(total_inches % INCHES_PER_FOOT)
    if inches == INCHES_PER_FOOT:
        feet, inches = feet + 1, 0
    return feet, inches
