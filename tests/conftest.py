"""
Pytest configuration and shared fixtures for the crash odds predictor tests.
"""

import pytest
import requests

from app import create_app
from coefficient_source import CoefficientSource
from config import Config
from history import PENDING, PredictionRecord
from service import OddsService

# Example coefficients: standard mean 1.98, main probability 55.56
SAMPLE_COEFFICIENTS = [1.8, 2.1, 1.9, 2.5, 1.6]


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, payload=None, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class FakeSession:
    """Records GET calls and replays a canned response or error."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, headers=None, timeout=None):
        self.calls.append({'url': url, 'headers': headers, 'timeout': timeout})
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def service(config):
    return OddsService(config)


@pytest.fixture
def app(config):
    return create_app(config, source=CoefficientSource(url=''))


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def sample_coefficients():
    return list(SAMPLE_COEFFICIENTS)


@pytest.fixture
def make_session():
    def _make(payload=None, status_code=200, error=None):
        return FakeSession(FakeResponse(payload, status_code), error=error)
    return _make


@pytest.fixture
def make_record():
    """Factory for PredictionRecords with a chosen main probability / odds / outcome."""
    counter = {'id': 0}

    def _make(main_probability=50.0, average_odds=2.0, status=PENDING,
              verified_round=None, is_safe=False, meets_filters=False):
        counter['id'] += 1
        odds = round(100 / main_probability, 2)
        return PredictionRecord(
            id=counter['id'],
            created_at='2024-06-01T12:00:00+00:00',
            average_odds=average_odds,
            probabilities=[main_probability],
            original_odds=[odds],
            raw_coefficients=[odds],
            analysis_mode='standard',
            meets_filters=meets_filters,
            is_safe_prediction=is_safe,
            status=status,
            verified_round=verified_round,
        )
    return _make
