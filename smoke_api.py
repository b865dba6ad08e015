"""
Smoke script for the Crash Odds Predictor API.
Start the server first (python app.py), then run this file against it.
"""
import json
import os
import sys

import requests

API_URL = os.environ.get("API_URL", "http://localhost:3000")


def check_health():
    print("\n=== /health ===")
    try:
        response = requests.get(f"{API_URL}/health", timeout=10)
        print(f"Status: {response.status_code}")
        print(f"Response: {json.dumps(response.json(), indent=2)}")
        return response.status_code == 200
    except requests.exceptions.RequestException as e:
        print(f"Error: {e}")
        return False


def check_config():
    print("\n=== /api/config ===")
    try:
        response = requests.get(f"{API_URL}/api/config", timeout=10)
        config = response.json()['config']
        print(f"Min odds: {config['minOdds']}  Min probability: {config['minProbability']}%")
        print(f"Max rounds: {config['maxRounds']}  Modes: {config['analysisModes']}")
        return response.status_code == 200
    except requests.exceptions.RequestException as e:
        print(f"Error: {e}")
        return False


def check_predict_and_verify():
    """Create an unfiltered standard prediction, then resolve it with a high coefficient."""
    print("\n=== /api/predict + /api/verify ===")
    payload = {
        "coefficients": [1.8, 2.1, 1.9, 2.5, 1.6],
        "settings": {"analysisMode": "standard", "applyFilters": False}
    }
    try:
        response = requests.post(f"{API_URL}/api/predict", json=payload, timeout=10)
        print(f"Status: {response.status_code}")
        if response.status_code != 200:
            print(f"Error: {response.text}")
            return False

        prediction = response.json()['prediction']
        print(f"Average odds: {prediction['averageOdds']}")
        print(f"Main probability: {prediction['mainProbability']}%")

        response = requests.post(f"{API_URL}/api/verify", json={
            "predictionId": prediction['id'],
            "currentCoefficient": prediction['averageOdds'] + 1,
            "currentRound": 1
        }, timeout=10)
        result = response.json()['result']
        print(f"Verification: {result['status']} (round {result.get('round')})")
        return result['status'] == 'success'

    except requests.exceptions.RequestException as e:
        print(f"Error: {e}")
        return False


def check_filtered_prediction():
    """Default filters reject a low-probability prediction with FILTERED_PREDICTION."""
    print("\n=== Filtered prediction ===")
    payload = {"coefficients": [3.5, 4.2, 2.8, 5.1, 3.9]}
    try:
        response = requests.post(f"{API_URL}/api/predict", json=payload, timeout=10)
        body = response.json()
        print(f"Status: {response.status_code} Code: {body.get('code')}")
        return response.status_code == 400 and body.get('code') == 'FILTERED_PREDICTION'
    except requests.exceptions.RequestException as e:
        print(f"Error: {e}")
        return False


def check_analysis():
    print("\n=== /api/stats + /api/analyze ===")
    try:
        stats = requests.get(f"{API_URL}/api/stats", timeout=10).json()['stats']
        print(f"Total: {stats['totalPredictions']}  Accuracy: {stats['predictionAccuracy']}%")
        analysis = requests.get(f"{API_URL}/api/analyze", timeout=10).json()['analysis']
        if analysis['hasData']:
            print(f"Best probability range: {analysis['percentageRanges']['bestRange']}")
            print(f"Best round: {analysis['roundAnalysis'].get('bestRound')}")
            print(f"Best odds range: {analysis['oddsAnalysis']['bestRange']}")
        else:
            print(analysis['message'])
        return True
    except requests.exceptions.RequestException as e:
        print(f"Error: {e}")
        return False


def main():
    print("=" * 60)
    print("CRASH ODDS PREDICTOR API - SMOKE CHECK")
    print("=" * 60)
    print(f"Target: {API_URL}")

    results = {
        "Health": check_health(),
        "Config": check_config(),
        "Predict + Verify": check_predict_and_verify(),
        "Filtered Prediction": check_filtered_prediction(),
        "Stats + Analysis": check_analysis(),
    }

    print("\n" + "=" * 60)
    for name, passed in results.items():
        print(f"{name}: {'PASSED' if passed else 'FAILED'}")

    passed = sum(results.values())
    print(f"\nTotal: {passed}/{len(results)} checks passed")
    return 0 if passed == len(results) else 1


if __name__ == "__main__":
    sys.exit(main())
