"""Linear-trend projections over monthly series.

The math runs on floats; projected amounts are returned as Decimals rounded
to cents. Identical input always produces identical output.
"""

import math
from decimal import Decimal
from typing import Sequence

from ledgerbook.domain.chart import to_cents
from ledgerbook.domain.entities import (
    MonthlyDataPoint,
    ProjectedValue,
    ProjectionSet,
    RegressionResult,
)

MIN_MONTHS_FOR_PREDICTION = 3
PROJECTION_HORIZONS = (3, 6, 12)
CONFIDENCE_HIGH = 80
CONFIDENCE_MEDIUM = 50
CONFIDENCE_LOW = 30

# 95% two-sided z-score; the band widens 10% per projected month.
Z_SCORE_95 = 1.96
UNCERTAINTY_GROWTH = 0.1


def insufficient_data_message(months_available: int) -> str:
    return (
        f"Se requieren al menos {MIN_MONTHS_FOR_PREDICTION} meses de datos históricos "
        "para generar predicciones. "
        f"Actualmente hay {months_available} mes(es) de datos disponibles."
    )


def has_insufficient_data(months_of_data: int) -> bool:
    return months_of_data < MIN_MONTHS_FOR_PREDICTION


def linear_regression(data: Sequence[float]) -> RegressionResult:
    """Least-squares fit of data against its indices 0..n-1.

    R² is clamped to [0, 1]; a flat series has R² 1.
    """
    n = len(data)
    if n == 0:
        return RegressionResult(slope=0.0, intercept=0.0, r_squared=0.0)
    if n == 1:
        return RegressionResult(slope=0.0, intercept=float(data[0]), r_squared=1.0)

    x_mean = (n - 1) / 2
    y_mean = sum(data) / n
    numerator = sum((i - x_mean) * (y - y_mean) for i, y in enumerate(data))
    denominator = sum((i - x_mean) ** 2 for i in range(n))
    slope = numerator / denominator if denominator != 0 else 0.0
    intercept = y_mean - slope * x_mean

    ss_res = sum((y - (slope * i + intercept)) ** 2 for i, y in enumerate(data))
    ss_tot = sum((y - y_mean) ** 2 for y in data)
    r_squared = 1 - ss_res / ss_tot if ss_tot != 0 else 1.0
    return RegressionResult(
        slope=slope, intercept=intercept, r_squared=max(0.0, min(1.0, r_squared))
    )


def moving_average(data: Sequence[float], window: int) -> list[float]:
    """Trailing moving average; the window is clipped to the data length."""
    if not data or window <= 0:
        return []
    window = min(window, len(data))
    result = []
    for i in range(len(data)):
        chunk = data[max(0, i - window + 1) : i + 1]
        result.append(sum(chunk) / len(chunk))
    return result


def standard_error(data: Sequence[float], regression: RegressionResult) -> float:
    """Standard error of the regression residuals (0 for two points or fewer)."""
    n = len(data)
    if n <= 2:
        return 0.0
    residuals = (y - (regression.slope * i + regression.intercept) for i, y in enumerate(data))
    return math.sqrt(sum(r**2 for r in residuals) / (n - 2))


def coefficient_of_variation(data: Sequence[float]) -> float:
    """Population standard deviation over |mean|, or 0 when the mean is 0."""
    if not data:
        return 0.0
    mean = sum(data) / len(data)
    if mean == 0:
        return 0.0
    variance = sum((value - mean) ** 2 for value in data) / len(data)
    return abs(math.sqrt(variance) / mean)


def add_months(month: str, months: int) -> str:
    """Shift a YYYY-MM key by a number of months."""
    year, month_number = (int(part) for part in month.split("-"))
    index = year * 12 + (month_number - 1) + months
    return f"{index // 12:04d}-{index % 12 + 1:02d}"


def project_values(historical: Sequence[MonthlyDataPoint], months: int) -> list[ProjectedValue]:
    """Project the linear trend months ahead of the last historical month.

    Each value is floored at 0; the bounds are ±1.96 standard errors,
    widened by 10% per step, with the lower bound floored at 0.
    """
    if not historical or months <= 0:
        return []

    values = [float(point.value) for point in historical]
    regression = linear_regression(values)
    error = standard_error(values, regression)
    last_month = historical[-1].month

    projections = []
    for i in range(months):
        predicted = regression.slope * (len(values) + i) + regression.intercept
        margin = error * Z_SCORE_95 * (1 + i * UNCERTAINTY_GROWTH)
        projections.append(
            ProjectedValue(
                month=add_months(last_month, i + 1),
                value=to_cents(Decimal(str(max(0.0, predicted)))),
                lower_bound=to_cents(Decimal(str(max(0.0, predicted - margin)))),
                upper_bound=to_cents(Decimal(str(predicted + margin))),
            )
        )
    return projections


def calculate_confidence(data: Sequence[float]) -> int:
    """Score how far a trend projection can be trusted, from 0 to 100.

    20 base points, plus up to 50 for R², plus up to 30 for sample size (24
    months earns all 30), minus up to 20 for the coefficient of variation.
    """
    if has_insufficient_data(len(data)):
        return 0
    regression = linear_regression(data)
    r_squared_score = regression.r_squared * 50
    sample_size_score = min(30.0, len(data) / 24 * 30)
    variance_penalty = min(20.0, coefficient_of_variation(data) * 20)
    confidence = r_squared_score + sample_size_score - variance_penalty + 20
    # half-up rounding
    return max(0, min(100, math.floor(confidence + 0.5)))


def confidence_level(confidence: int) -> str:
    if confidence >= CONFIDENCE_HIGH:
        return "high"
    if confidence >= CONFIDENCE_MEDIUM:
        return "medium"
    return "low"


def generate_projection_set(historical: Sequence[MonthlyDataPoint]) -> ProjectionSet:
    """Build 3, 6 and 12 month projections for one series.

    Series shorter than the minimum get no projections and confidence 0.
    """
    historical = tuple(historical)
    if has_insufficient_data(len(historical)):
        return ProjectionSet(historical=historical, confidence=0, confidence_level="low")

    values = [float(point.value) for point in historical]
    confidence = calculate_confidence(values)
    three, six, twelve = (project_values(historical, months) for months in PROJECTION_HORIZONS)
    return ProjectionSet(
        historical=historical,
        three_months=tuple(three),
        six_months=tuple(six),
        twelve_months=tuple(twelve),
        confidence=confidence,
        confidence_level=confidence_level(confidence),
    )
