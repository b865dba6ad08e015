"""
Unit tests for verification.py: pending -> success | failed over rounds.
"""

import pytest

from history import FAILED, PENDING, SUCCESS
from verification import verify_prediction

MAX_ROUNDS = 5


class TestVerifyPrediction:

    @pytest.mark.parametrize('current_round', [1, 3, 5, 9])
    def test_reaching_predicted_odds_succeeds_at_any_round(self, make_record, current_round):
        record = make_record(average_odds=2.0)
        result = verify_prediction(record, 2.0, current_round, MAX_ROUNDS)
        assert result.verified is True
        assert result.status == SUCCESS
        assert result.round == current_round
        assert record.status == SUCCESS
        assert record.verified_round == current_round

    def test_below_prediction_stays_pending(self, make_record):
        record = make_record(average_odds=2.0)
        result = verify_prediction(record, 1.5, 2, MAX_ROUNDS)
        assert result.verified is False
        assert result.status == PENDING
        assert result.next_round == 3
        assert record.status == PENDING

    def test_fails_at_max_rounds(self, make_record):
        record = make_record(average_odds=2.0)
        result = verify_prediction(record, 1.5, MAX_ROUNDS, MAX_ROUNDS)
        assert result.verified is False
        assert result.status == FAILED
        assert '5 rounds' in result.message
        assert record.status == FAILED
        assert record.verified_round == MAX_ROUNDS

    def test_full_round_sequence(self, make_record):
        record = make_record(average_odds=3.0)
        for current_round in range(1, MAX_ROUNDS):
            assert verify_prediction(record, 1.2, current_round, MAX_ROUNDS).status == PENDING
        assert verify_prediction(record, 1.2, MAX_ROUNDS, MAX_ROUNDS).status == FAILED

    def test_success_is_final(self, make_record):
        record = make_record(average_odds=2.0)
        verify_prediction(record, 2.5, 1, MAX_ROUNDS)

        again = verify_prediction(record, 1.1, MAX_ROUNDS, MAX_ROUNDS)
        assert again.status == SUCCESS
        assert again.verified is True
        assert again.round == 1
        assert record.status == SUCCESS

    def test_failure_is_final(self, make_record):
        record = make_record(average_odds=2.0)
        verify_prediction(record, 1.1, MAX_ROUNDS, MAX_ROUNDS)

        again = verify_prediction(record, 50.0, 1, MAX_ROUNDS)
        assert again.status == FAILED
        assert again.verified is False
        assert record.status == FAILED
        assert record.observed_coefficient == 1.1

    def test_result_payload(self, make_record):
        record = make_record(average_odds=2.0)
        assert verify_prediction(record, 1.5, 1, MAX_ROUNDS).to_dict() == {
            'verified': False, 'status': PENDING, 'currentRound': 2,
        }
        assert verify_prediction(record, 2.5, 2, MAX_ROUNDS).to_dict() == {
            'verified': True, 'status': SUCCESS, 'round': 2,
        }
