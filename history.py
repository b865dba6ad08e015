"""
In-memory prediction history.

Records are kept newest-first and capped at ``limit`` entries; the oldest
records are evicted when a new one pushes the list past the cap. One lock
guards every mutation so the threaded Flask server never loses an update.
"""
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from errors import RecordNotFoundError

PENDING = 'pending'
SUCCESS = 'success'
FAILED = 'failed'


@dataclass
class PredictionRecord:
    id: int
    created_at: str
    average_odds: float
    probabilities: List[float]
    original_odds: List[float]
    raw_coefficients: List[Any]
    analysis_mode: str
    meets_filters: bool
    is_safe_prediction: bool
    exclude_extremes: bool = False
    trend_analysis: bool = False
    status: str = PENDING
    verified_round: Optional[int] = None
    verified_at: Optional[str] = None
    observed_coefficient: Optional[float] = None

    @property
    def main_probability(self):
        return self.probabilities[0]

    @property
    def verification_status(self):
        return self.status

    @property
    def is_pending(self):
        return self.status == PENDING

    def resolve(self, status, round_index, observed):
        """Terminal write: pending -> success | failed, exactly once."""
        if status not in (SUCCESS, FAILED):
            raise ValueError(f"Not a terminal status: {status}")
        if not self.is_pending:
            raise ValueError(f"Prediction {self.id} already resolved as {self.status}")
        self.status = status
        self.verified_round = round_index
        self.verified_at = datetime.now(timezone.utc).isoformat()
        self.observed_coefficient = observed

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'createdAt': self.created_at,
            'averageOdds': self.average_odds,
            'probabilities': list(self.probabilities),
            'mainProbability': self.main_probability,
            'originalOdds': list(self.original_odds),
            'rawCoefficients': list(self.raw_coefficients),
            'analysisMode': self.analysis_mode,
            'excludeExtremes': self.exclude_extremes,
            'trendAnalysis': self.trend_analysis,
            'meetsFilters': self.meets_filters,
            'isSafePrediction': self.is_safe_prediction,
            'status': self.status,
            'verificationStatus': self.verification_status,
            'verifiedRound': self.verified_round,
            'verifiedAt': self.verified_at,
            'observedCoefficient': self.observed_coefficient,
        }


class HistoryStore:
    """Newest-first bounded list of PredictionRecords with a single owner lock."""

    def __init__(self, limit=100):
        self.limit = limit
        self._records: List[PredictionRecord] = []
        self._lock = threading.Lock()
        self._last_id = 0

    def __len__(self):
        with self._lock:
            return len(self._records)

    def next_id(self):
        """Millisecond timestamp, bumped so ids stay strictly increasing."""
        with self._lock:
            self._last_id = max(int(time.time() * 1000), self._last_id + 1)
            return self._last_id

    def append(self, record):
        """Insert at the head and evict anything past the cap. Returns evicted records."""
        with self._lock:
            self._records.insert(0, record)
            return self._trim()

    def trim_to_capacity(self):
        with self._lock:
            return self._trim()

    def _trim(self):
        evicted = self._records[self.limit:]
        del self._records[self.limit:]
        return evicted

    def find_by_id(self, prediction_id):
        with self._lock:
            return self._find(prediction_id)

    def _find(self, prediction_id):
        for record in self._records:
            if record.id == prediction_id:
                return record
        return None

    def update(self, prediction_id, fn):
        """
        Run ``fn(record)`` under the lock and return its result.

        Raises RecordNotFoundError when the id is not held in history.
        """
        with self._lock:
            record = self._find(prediction_id)
            if record is None:
                raise RecordNotFoundError(prediction_id)
            return fn(record)

    def scan_all(self):
        """Snapshot of all records, newest first."""
        with self._lock:
            return list(self._records)
