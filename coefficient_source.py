"""Upstream crash-game state feed.

Fetches the most recent stop coefficient from the game gateway so the
frontend can collect rounds without talking to the gateway directly.
"""
import logging
from datetime import datetime, timezone

import requests

from errors import CoefficientSourceError
from predictor import round_half_up

logger = logging.getLogger(__name__)

# The gateway reports an instant crash as 1.00; it is stored as 1.01 so it
# stays a valid coefficient (> 1.0) downstream.
INSTANT_CRASH = 1.00
INSTANT_CRASH_REPLACEMENT = 1.01


def adjust_coefficient(value):
    if value is None:
        return None
    value = float(value)
    if value == INSTANT_CRASH:
        value = INSTANT_CRASH_REPLACEMENT
    return round_half_up(value)


class CoefficientSource:
    """Authenticated GET against the gateway's /state endpoint."""

    def __init__(self, url, customer_id='', session_id='', timeout=10.0, session=None):
        self.url = url
        self.customer_id = customer_id
        self.session_id = session_id
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config):
        return cls(
            url=config.source_url,
            customer_id=config.source_customer_id,
            session_id=config.source_session_id,
            timeout=config.source_timeout,
        )

    @property
    def enabled(self):
        return bool(self.url)

    def _headers(self):
        headers = {'accept': 'application/json'}
        if self.customer_id:
            headers['customer-id'] = self.customer_id
        if self.session_id:
            headers['session-id'] = self.session_id
        return headers

    def fetch_state(self) -> dict:
        """Raw gateway state.

        Raises:
            CoefficientSourceError: feed not configured, network failure,
                non-2xx status or a body that is not JSON
        """
        if not self.enabled:
            raise CoefficientSourceError("Coefficient source is not configured (set ODDS_SOURCE_URL)")

        try:
            response = self.session.get(self.url, headers=self._headers(), timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.JSONDecodeError as e:
            raise CoefficientSourceError("Coefficient source returned invalid JSON", original_error=e)
        except requests.exceptions.Timeout as e:
            raise CoefficientSourceError("Coefficient source timed out", original_error=e)
        except requests.exceptions.RequestException as e:
            raise CoefficientSourceError("Coefficient source request failed", original_error=e)
        except ValueError as e:
            raise CoefficientSourceError("Coefficient source returned invalid JSON", original_error=e)

    def fetch_latest(self):
        """Latest stop coefficient (or None when the feed has none yet) with a timestamp."""
        data = self.fetch_state()
        if not isinstance(data, dict):
            raise CoefficientSourceError("Coefficient source returned an unexpected payload")
        stops = data.get('stopCoefficients') or []
        coefficient = adjust_coefficient(stops[0]) if stops else None
        if coefficient is None:
            logger.debug("Coefficient source returned no stop coefficients")

        return {
            'coefficient': coefficient,
            'timestamp': datetime.now(timezone.utc).isoformat(),
        }
