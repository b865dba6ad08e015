"""
Exceptions for the crash odds predictor.

Every error carries a machine-readable ``code`` and the HTTP status the API
answers with, so routes can turn any of them into a JSON error body:

    try:
        record = service.create_prediction(coefficients, settings)
    except OddsPredictorError as e:
        return jsonify(e.to_dict()), e.status_code
"""


class OddsPredictorError(Exception):
    """Base exception for all predictor errors."""

    code = 'PREDICTOR_ERROR'
    status_code = 500

    def __init__(self, message):
        self.message = message
        super().__init__(message)

    def to_dict(self):
        return {'success': False, 'error': self.message, 'code': self.code}


class InvalidRequestError(OddsPredictorError):
    """Request body is missing a field or has the wrong shape."""

    code = 'INVALID_REQUEST'
    status_code = 400


class InsufficientDataError(OddsPredictorError):
    """
    Not enough valid coefficients to compute a prediction.

    Raised when fewer than the required number of coefficients survive
    normalization (finite numbers greater than 1.0).
    """

    code = 'INSUFFICIENT_DATA'
    status_code = 400

    def __init__(self, found, required):
        self.found = found
        self.required = required
        super().__init__(
            f"At least {required} valid coefficients are required (got {found})"
        )


class FilteredPredictionError(OddsPredictorError):
    """
    Computed prediction failed the minimum odds / minimum probability gate.

    This is a business rule rather than a fault: the caller gets the computed
    values back so it can show why the prediction was rejected.
    """

    code = 'FILTERED_PREDICTION'
    status_code = 400

    def __init__(self, average_odds, main_probability, min_odds, min_probability):
        self.average_odds = average_odds
        self.main_probability = main_probability
        self.min_odds = min_odds
        self.min_probability = min_probability
        super().__init__(
            f"Prediction rejected by quality filters: odds {average_odds:.2f} "
            f"(min {min_odds:.2f}), probability {main_probability:.2f}% "
            f"(min {min_probability:.2f}%)"
        )

    def to_dict(self):
        body = super().to_dict()
        body['details'] = {
            'averageOdds': self.average_odds,
            'mainProbability': self.main_probability,
            'minOdds': self.min_odds,
            'minProbability': self.min_probability,
        }
        return body


class RecordNotFoundError(OddsPredictorError):
    """No prediction with the given id is held in history."""

    code = 'NOT_FOUND'
    status_code = 404

    def __init__(self, prediction_id):
        self.prediction_id = prediction_id
        super().__init__(f"Prediction not found: {prediction_id}")


class CoefficientSourceError(OddsPredictorError):
    """Upstream coefficient feed is unavailable or returned garbage."""

    code = 'SOURCE_UNAVAILABLE'
    status_code = 502

    def __init__(self, message, original_error=None):
        self.original_error = original_error
        if original_error is not None:
            message += f" (caused by: {type(original_error).__name__}: {original_error})"
        super().__init__(message)


class ConfigurationError(OddsPredictorError):
    """An environment setting could not be parsed."""

    code = 'CONFIGURATION_ERROR'

    def __init__(self, setting, message):
        self.setting = setting
        super().__init__(f"Configuration error ({setting}): {message}")
