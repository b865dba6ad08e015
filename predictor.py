"""
Crash odds prediction engine.
- Normalizes a raw coefficient list (finite values > 1.0 only)
- Three averaging modes: standard (mean), advanced (linear weights), pro (mean x trend)
- Implied probabilities per coefficient, quality gate and safe-prediction flag
"""
import logging
import math
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

import numpy as np

from errors import FilteredPredictionError, InsufficientDataError

logger = logging.getLogger(__name__)

ANALYSIS_MODES = ('standard', 'advanced', 'pro')
DEFAULT_MODE = 'standard'

# advanced mode: weight of position i is 1 + WEIGHT_STEP * i
WEIGHT_STEP = 0.1


@dataclass
class AnalysisSettings:
    analysis_mode: str = DEFAULT_MODE
    exclude_extremes: bool = False
    trend_analysis: bool = False
    min_odds: Optional[float] = None
    min_probability: Optional[float] = None
    apply_filters: bool = True

    @classmethod
    def from_dict(cls, data):
        """Build settings from the camelCase JSON body sent by the frontend."""
        if not data:
            return cls()

        mode = data.get('analysisMode') or DEFAULT_MODE
        if mode not in ANALYSIS_MODES:
            logger.warning("Unknown analysis mode %r, using %s", mode, DEFAULT_MODE)
            mode = DEFAULT_MODE

        return cls(
            analysis_mode=mode,
            exclude_extremes=_flag(data.get('excludeExtremes'), False),
            trend_analysis=_flag(data.get('trendAnalysis'), False),
            min_odds=_optional_float(data.get('minOdds')),
            min_probability=_optional_float(data.get('minProbability')),
            apply_filters=_flag(data.get('applyFilters'), True),
        )

    def to_dict(self):
        return {
            'analysisMode': self.analysis_mode,
            'excludeExtremes': self.exclude_extremes,
            'trendAnalysis': self.trend_analysis,
            'minOdds': self.min_odds,
            'minProbability': self.min_probability,
            'applyFilters': self.apply_filters,
        }


@dataclass
class PredictionResult:
    average_odds: float
    probabilities: List[float]
    odds: List[float]
    analysis_mode: str
    meets_filters: bool
    is_safe_prediction: bool
    trend: float = 1.0
    settings: AnalysisSettings = field(default_factory=AnalysisSettings)

    @property
    def main_probability(self):
        return self.probabilities[0]


def _optional_float(value):
    if value is None or value == '':
        return None
    return float(value)


_TRUE_STRINGS = ('true', '1', 'yes', 'on')
_FALSE_STRINGS = ('false', '0', 'no', 'off', '')


def _flag(value, default):
    """Parse a JSON/form boolean. Strings like "false" are read, not truth-tested."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
        raise ValueError(f"expected a boolean, got {value!r}")
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    raise ValueError(f"expected a boolean, got {value!r}")


def round_half_up(value, places=2):
    """Round like JavaScript's toFixed: exact ties go away from zero, not to even."""
    if not math.isfinite(value):
        return value
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def _to_coefficient(value):
    """Return ``value`` as a float if it is a usable coefficient, else None."""
    if isinstance(value, bool):
        return None
    try:
        odd = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(odd) or odd <= 1:
        return None
    return odd


def normalize_coefficients(values, min_count=5, exclude_extremes=False):
    """
    Filter raw values down to valid coefficients.

    The minimum count is checked before extremes are removed, so a list of
    exactly ``min_count`` values is accepted and then trimmed by two.
    """
    odds = [odd for odd in (_to_coefficient(v) for v in values) if odd is not None]

    if len(odds) < min_count:
        raise InsufficientDataError(found=len(odds), required=min_count)

    if exclude_extremes:
        odds = sorted(odds)[1:-1]
        if not odds:
            raise InsufficientDataError(found=0, required=min_count)

    return odds


def calculate_trend(odds):
    """Second-half mean relative to first-half mean, as a multiplier around 1."""
    mid = len(odds) // 2
    first_half, second_half = odds[:mid], odds[mid:]
    if not first_half:
        return 1.0

    first_avg = float(np.mean(first_half))
    second_avg = float(np.mean(second_half))
    return 1 + ((second_avg - first_avg) / first_avg)


def implied_probabilities(odds):
    return [round_half_up(100 / odd) for odd in odds]


def floor_odds(average, odds):
    """
    Round ``average`` to 2 decimals without dropping below the smallest coefficient.

    The floor is the smallest coefficient rounded up to the next cent, so
    inputs with more than 2 decimals (1.004) still yield a threshold above
    every one of them (1.01, never 1.00).
    """
    scaled = round(min(odds) * 100, 6)
    floor = math.ceil(scaled) / 100 if math.isfinite(scaled) else min(odds)
    return max(round_half_up(average), floor)


class PredictionEngine:
    """Turns coefficients + settings into a PredictionResult using config thresholds."""

    def __init__(self, config):
        self.config = config

    def average(self, odds, settings):
        mode = settings.analysis_mode
        trend = 1.0

        if mode == 'advanced':
            weights = 1 + WEIGHT_STEP * np.arange(len(odds))
            average = float(np.average(odds, weights=weights))
        elif mode == 'pro':
            if settings.trend_analysis:
                trend = calculate_trend(odds)
            average = float(np.mean(odds)) * trend
        else:
            average = float(np.mean(odds))

        return average, trend

    def predict(self, coefficients, settings=None):
        settings = settings or AnalysisSettings()

        odds = normalize_coefficients(
            coefficients,
            min_count=self.config.required_coefficients,
            exclude_extremes=settings.exclude_extremes,
        )

        average, trend = self.average(odds, settings)
        average_odds = floor_odds(average, odds)
        probabilities = implied_probabilities(odds)
        main_probability = probabilities[0]

        min_odds = settings.min_odds if settings.min_odds is not None else self.config.min_odds
        min_probability = (settings.min_probability if settings.min_probability is not None
                           else self.config.min_probability)
        meets_filters = average_odds >= min_odds and main_probability >= min_probability

        if not meets_filters and settings.apply_filters:
            logger.info("Prediction filtered: odds=%.2f prob=%.2f (min %.2f / %.2f)",
                        average_odds, main_probability, min_odds, min_probability)
            raise FilteredPredictionError(average_odds, main_probability, min_odds, min_probability)

        return PredictionResult(
            average_odds=average_odds,
            probabilities=probabilities,
            odds=odds,
            analysis_mode=settings.analysis_mode,
            meets_filters=meets_filters,
            is_safe_prediction=main_probability >= self.config.safe_probability,
            trend=round(trend, 4),
            settings=settings,
        )
