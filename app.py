"""
Crash Odds Predictor API
- Predicts an odds threshold + implied probabilities from recent coefficients
- Verifies pending predictions over the following rounds
- History, stats and success-rate analysis over the in-memory history
"""
import logging

from flask import Flask, jsonify, request
from flask_cors import CORS

from coefficient_source import CoefficientSource
from config import Config, setup_logging
from errors import InvalidRequestError, OddsPredictorError
from service import OddsService

logger = logging.getLogger(__name__)

API_VERSION = "1.0"


def error_response(error):
    return jsonify(error.to_dict()), error.status_code


def internal_error(e):
    logger.exception("Unhandled error")
    return jsonify({'success': False, 'error': str(e), 'code': 'INTERNAL_ERROR'}), 500


def create_app(config=None, source=None):
    config = config or Config.from_env()

    app = Flask(__name__)
    CORS(app)

    service = OddsService(config)
    source = source or CoefficientSource.from_config(config)
    app.extensions['odds_service'] = service
    app.extensions['coefficient_source'] = source

    @app.route('/')
    def home():
        return jsonify({
            "message": "Crash Odds Predictor API",
            "version": API_VERSION,
            "endpoints": {
                "/api/coefficients": "GET - Latest coefficient from the game feed",
                "/api/predict": "POST - Predict from a list of coefficients",
                "/api/verify": "POST - Check a pending prediction against a new round",
                "/api/history": "GET - Prediction history",
                "/api/stats": "GET - Accuracy stats",
                "/api/analyze": "GET - Best probability / round / odds ranges",
                "/api/config": "GET - Active thresholds",
                "/health": "GET - Status check"
            },
            "status": "online"
        })

    @app.route('/health')
    def health():
        return jsonify({
            "status": "healthy",
            "version": API_VERSION,
            "history_size": len(service.store),
            "source_enabled": source.enabled
        })

    @app.route('/api/coefficients')
    def get_coefficients():
        try:
            latest = source.fetch_latest()
            return jsonify({'success': True, **latest})
        except OddsPredictorError as e:
            logger.warning("Coefficient fetch failed: %s", e)
            return error_response(e)
        except Exception as e:
            return internal_error(e)

    @app.route('/api/predict', methods=['POST'])
    def predict():
        """
        Input:
        {
            "coefficients": [1.8, 2.1, 1.9, 2.5, 1.6],
            "settings": {
                "analysisMode": "standard" | "advanced" | "pro",
                "excludeExtremes": false,
                "trendAnalysis": false,
                "minOdds": 1.5,
                "minProbability": 70,
                "applyFilters": true
            }
        }
        """
        try:
            data = request.get_json(silent=True) or {}
            coefficients = data.get('coefficients')
            if not isinstance(coefficients, list):
                raise InvalidRequestError('coefficients are required')

            record = service.create_prediction(coefficients, data.get('settings'))
            return jsonify({
                'success': True,
                'prediction': record.to_dict(),
                'historySize': len(service.store)
            })

        except OddsPredictorError as e:
            return error_response(e)
        except Exception as e:
            return internal_error(e)

    @app.route('/api/verify', methods=['POST'])
    def verify():
        """
        Input: {"predictionId": 1718000000000, "currentCoefficient": 2.35, "currentRound": 1}
        """
        try:
            data = request.get_json(silent=True) or {}
            for key in ('predictionId', 'currentCoefficient', 'currentRound'):
                if data.get(key) is None:
                    raise InvalidRequestError(f'{key} is required')

            result, record = service.verify(
                data['predictionId'], data['currentCoefficient'], data['currentRound']
            )
            return jsonify({
                'success': True,
                'result': result.to_dict(),
                'prediction': record.to_dict()
            })

        except OddsPredictorError as e:
            return error_response(e)
        except Exception as e:
            return internal_error(e)

    @app.route('/api/history')
    def history():
        try:
            return jsonify({'success': True, **service.history()})
        except Exception as e:
            return internal_error(e)

    @app.route('/api/stats')
    def stats():
        try:
            return jsonify({'success': True, 'stats': service.stats()})
        except Exception as e:
            return internal_error(e)

    @app.route('/api/analyze')
    def analyze():
        try:
            return jsonify({'success': True, 'analysis': service.analysis()})
        except Exception as e:
            return internal_error(e)

    @app.route('/api/config')
    def get_config():
        try:
            return jsonify({'success': True, 'config': service.config_summary()})
        except Exception as e:
            return internal_error(e)

    return app


if __name__ == '__main__':
    config = Config.from_env()
    setup_logging(config.log_level)
    app = create_app(config)
    print(f"[OK] Crash Odds Predictor v{API_VERSION} on port {config.port}")
    print(f"  Thresholds: min odds {config.min_odds}, min probability {config.min_probability}%, "
          f"safe {config.safe_probability}%, {config.max_rounds} rounds, history {config.history_limit}")
    if not config.source_url:
        print("[WARN] ODDS_SOURCE_URL not set, /api/coefficients disabled")
    app.run(debug=False, host='0.0.0.0', port=config.port)
