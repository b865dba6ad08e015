"""
History analytics: success-rate breakdowns over resolved predictions.

- Probability ranges: main probability in width-10 buckets, best by success count
- Rounds: resolution round, best by success rate
- Odds ranges: average odds of successful predictions in width-0.5 buckets
"""
import math

import pandas as pd

from history import FAILED, PENDING, SUCCESS
from predictor import round_half_up

NO_DATA = {'hasData': False}


def _frame(records):
    return pd.DataFrame([{
        'main_probability': r.main_probability,
        'average_odds': r.average_odds,
        'round': r.verified_round,
        'success': r.status == SUCCESS,
    } for r in records])


def _rate(success, total):
    return (success / total) * 100 if total else 0.0


def _bucket_table(df, key):
    grouped = df.groupby(key, sort=False).agg(
        total=('success', 'size'),
        success=('success', 'sum'),
    )
    return [
        {
            'range': name,
            'total': int(row['total']),
            'success': int(row['success']),
            'successRate': round_half_up(_rate(row['success'], row['total']), 1),
        }
        for name, row in grouped.iterrows()
    ]


def _probability_range(probability):
    start = int(math.floor(probability / 10) * 10)
    return f"{start}-{start + 10}"


def _odds_range(odds):
    start = math.floor(odds * 2) / 2
    return f"{start:.1f}-{start + 0.5:.1f}"


def analyze_percentage_ranges(records):
    """Best main-probability bucket among resolved predictions."""
    resolved = [r for r in records if r.status != PENDING]
    if not resolved:
        return dict(NO_DATA)

    df = _frame(resolved)
    df['range'] = df['main_probability'].map(_probability_range)
    ranges = _bucket_table(df, 'range')

    best = None
    for bucket in ranges:
        if (best is None or bucket['success'] > best['success']
                or (bucket['success'] == best['success'] and bucket['successRate'] > best['successRate'])):
            best = bucket

    return {
        'hasData': True,
        'bestRange': best['range'],
        'bestCount': best['success'],
        'successRate': best['successRate'],
        'ranges': ranges,
    }


def analyze_rounds(records):
    """Best resolution round by success rate, ties broken by success count."""
    resolved = [r for r in records if r.status != PENDING and r.verified_round is not None]
    if not resolved:
        return dict(NO_DATA)

    df = _frame(resolved)
    grouped = df.groupby('round').agg(total=('success', 'size'), success=('success', 'sum'))

    rounds = []
    best = None
    for round_index, row in grouped.iterrows():
        entry = {
            'round': int(round_index),
            'total': int(row['total']),
            'success': int(row['success']),
            'successRate': round_half_up(_rate(row['success'], row['total']), 1),
        }
        rounds.append(entry)
        if (best is None or entry['successRate'] > best['successRate']
                or (entry['successRate'] == best['successRate'] and entry['success'] > best['success'])):
            best = entry

    return {
        'hasData': True,
        'bestRound': best['round'],
        'roundCount': best['success'],
        'totalForRound': best['total'],
        'successRate': best['successRate'],
        'rounds': rounds,
    }


def analyze_odds_ranges(records):
    """Most frequent average-odds bucket among successful predictions."""
    successful = [r for r in records if r.status == SUCCESS]
    if not successful:
        return dict(NO_DATA)

    counts = pd.Series([_odds_range(r.average_odds) for r in successful]).value_counts(sort=False)

    best_range, best_count = None, 0
    for name, count in counts.items():
        if count > best_count:
            best_range, best_count = name, int(count)

    return {
        'hasData': True,
        'bestRange': best_range,
        'successCount': best_count,
        'ranges': [{'range': name, 'count': int(count)} for name, count in counts.items()],
    }


def build_analysis(records):
    successful = [r for r in records if r.status == SUCCESS]
    if not successful:
        return {
            'hasData': False,
            'message': 'Not enough data for analysis yet',
        }

    return {
        'hasData': True,
        'percentageRanges': analyze_percentage_ranges(records),
        'roundAnalysis': analyze_rounds(records),
        'oddsAnalysis': analyze_odds_ranges(successful),
        'totalSuccessful': len(successful),
    }


def status_counts(records):
    counts = {'total': len(records), SUCCESS: 0, FAILED: 0, PENDING: 0}
    for r in records:
        counts[r.status] += 1
    return counts


def build_stats(records):
    counts = status_counts(records)
    total = counts['total']
    resolved = counts[SUCCESS] + counts[FAILED]

    safe = [r for r in records if r.is_safe_prediction]
    safe_success = sum(1 for r in safe if r.status == SUCCESS)

    return {
        'totalPredictions': total,
        'successCount': counts[SUCCESS],
        'failedCount': counts[FAILED],
        'pendingCount': counts[PENDING],
        'predictionAccuracy': round_half_up(_rate(counts[SUCCESS], total), 1),
        'resolvedAccuracy': round_half_up(_rate(counts[SUCCESS], resolved), 1),
        'safePredictions': len(safe),
        'safeAccuracy': round_half_up(_rate(safe_success, len(safe)), 1),
        'meetsFiltersCount': sum(1 for r in records if r.meets_filters),
    }
