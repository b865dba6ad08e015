"""
Verification rounds for pending predictions.

A prediction succeeds as soon as an observed coefficient reaches its
average odds, and fails once ``max_rounds`` observations have passed without
that happening. Resolved predictions are never touched again.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from history import FAILED, PENDING, SUCCESS

logger = logging.getLogger(__name__)


@dataclass
class VerificationResult:
    verified: bool
    status: str
    round: Optional[int] = None
    next_round: Optional[int] = None
    message: Optional[str] = None

    def to_dict(self):
        result = {'verified': self.verified, 'status': self.status}
        if self.round is not None:
            result['round'] = self.round
        if self.next_round is not None:
            result['currentRound'] = self.next_round
        if self.message:
            result['message'] = self.message
        return result


def verify_prediction(record, observed, current_round, max_rounds):
    """Advance ``record`` by one observation. Mutates the record on resolution."""
    if not record.is_pending:
        return VerificationResult(
            verified=record.status == SUCCESS,
            status=record.status,
            round=record.verified_round,
            message='Prediction already resolved',
        )

    if observed >= record.average_odds:
        record.resolve(SUCCESS, current_round, observed)
        logger.info("Prediction %s confirmed at round %s (%.2f >= %.2f)",
                    record.id, current_round, observed, record.average_odds)
        return VerificationResult(verified=True, status=SUCCESS, round=current_round)

    if current_round >= max_rounds:
        record.resolve(FAILED, current_round, observed)
        logger.info("Prediction %s failed after %s rounds", record.id, max_rounds)
        return VerificationResult(
            verified=False,
            status=FAILED,
            round=current_round,
            message=f'Not confirmed within {max_rounds} rounds',
        )

    return VerificationResult(verified=False, status=PENDING, next_round=current_round + 1)
