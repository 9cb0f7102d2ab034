# talentpulse/ml/interventions.py
#
# Helpers the dashboard runs on top of scorer output.

from typing import Iterable

from talentpulse.models import ChurnPrediction, RiskLevel

DEFAULT_REPLACEMENT_COST = 0.5   # fraction of annual salary lost when someone leaves

URGENT_LEVELS = {RiskLevel.HIGH, RiskLevel.CRITICAL}

# Risk factor → recommended action. Anything unlisted gets the generic action.
FACTOR_ACTIONS = {
    "Below average performance rating": "Consider performance improvement plan and additional training",
    "Low engagement score":             "Schedule one-on-one meeting to discuss career goals and concerns",
    "Poor work-life balance":           "Explore flexible work arrangements or workload adjustment",
    "Below market salary":              "Review compensation package and consider salary adjustment",
}
DEFAULT_ACTION = "Monitor closely and provide additional support"


def calculate_retention_roi(salary: float, replacement_cost: float = DEFAULT_REPLACEMENT_COST) -> float:
    """Estimated cost avoided by retaining this employee."""
    return salary * replacement_cost


def prioritize_interventions(predictions: Iterable[ChurnPrediction]) -> list[ChurnPrediction]:
    """HIGH and CRITICAL predictions only, riskiest first."""
    urgent = [p for p in predictions if p.risk_level in URGENT_LEVELS]
    return sorted(urgent, key=lambda p: p.risk_score, reverse=True)


def generate_actionable_insights(prediction: ChurnPrediction) -> list[str]:
    # one action per factor, same order as the factors
    return [FACTOR_ACTIONS.get(factor, DEFAULT_ACTION) for factor in prediction.risk_factors]
