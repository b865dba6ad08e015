"""
OddsService: single owner of the prediction history.

Creates records from engine results, runs verification rounds against them
and answers history / stats / analysis queries from one shared store.
"""
import logging
import math
from datetime import datetime, timezone

import analytics
from errors import InvalidRequestError
from history import HistoryStore, PredictionRecord
from predictor import ANALYSIS_MODES, AnalysisSettings, PredictionEngine
from verification import verify_prediction

logger = logging.getLogger(__name__)


def _number(value, name):
    if isinstance(value, bool):
        raise InvalidRequestError(f"{name} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        raise InvalidRequestError(f"{name} must be a number")
    if not math.isfinite(number):
        raise InvalidRequestError(f"{name} must be finite")
    return number


class OddsService:

    def __init__(self, config, store=None):
        self.config = config
        self.engine = PredictionEngine(config)
        self.store = store if store is not None else HistoryStore(limit=config.history_limit)

    def create_prediction(self, coefficients, settings=None):
        """Predict from ``coefficients`` and append the record to history."""
        if not isinstance(coefficients, (list, tuple)):
            raise InvalidRequestError('coefficients must be a list of numbers')
        if settings is None or isinstance(settings, dict):
            try:
                settings = AnalysisSettings.from_dict(settings)
            except (TypeError, ValueError, OverflowError) as e:
                raise InvalidRequestError(f"Invalid settings: {e}")
        elif not isinstance(settings, AnalysisSettings):
            raise InvalidRequestError('settings must be an object')

        result = self.engine.predict(coefficients, settings)

        record = PredictionRecord(
            id=self.store.next_id(),
            created_at=datetime.now(timezone.utc).isoformat(),
            average_odds=result.average_odds,
            probabilities=result.probabilities,
            original_odds=result.odds,
            raw_coefficients=list(coefficients),
            analysis_mode=result.analysis_mode,
            meets_filters=result.meets_filters,
            is_safe_prediction=result.is_safe_prediction,
            exclude_extremes=settings.exclude_extremes,
            trend_analysis=settings.trend_analysis,
        )
        evicted = self.store.append(record)
        if evicted:
            logger.debug("History cap %s reached, evicted %s record(s)", self.store.limit, len(evicted))

        logger.info("Prediction %s: odds=%.2f prob=%.2f mode=%s safe=%s",
                    record.id, record.average_odds, record.main_probability,
                    record.analysis_mode, record.is_safe_prediction)
        return record

    def verify(self, prediction_id, observed, current_round):
        """Apply one observed round to a stored prediction. Returns (result, record)."""
        prediction_id = int(_number(prediction_id, 'predictionId'))
        observed = _number(observed, 'currentCoefficient')
        current_round = int(_number(current_round, 'currentRound'))

        def _apply(record):
            return verify_prediction(record, observed, current_round, self.config.max_rounds), record

        return self.store.update(prediction_id, _apply)

    def history(self):
        records = self.store.scan_all()
        return {
            'history': [r.to_dict() for r in records],
            'stats': analytics.status_counts(records),
        }

    def stats(self):
        return analytics.build_stats(self.store.scan_all())

    def analysis(self):
        return analytics.build_analysis(self.store.scan_all())

    def config_summary(self):
        return {
            'minOdds': self.config.min_odds,
            'minProbability': self.config.min_probability,
            'safeProbability': self.config.safe_probability,
            'maxRounds': self.config.max_rounds,
            'requiredCoefficients': self.config.required_coefficients,
            'historyLimit': self.config.history_limit,
            'analysisModes': list(ANALYSIS_MODES),
            'defaultSettings': AnalysisSettings().to_dict(),
        }
