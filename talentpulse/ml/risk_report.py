# talentpulse/ml/risk_report.py
#
# Aggregates a batch of churn predictions into the dashboard summary:
#   - headcount per risk tier (all four tiers always present)
#   - mean/min/max/std of risk score and confidence
#   - most common risk factors
#   - optional count above the at-risk threshold

from typing import Iterable, Optional

import numpy as np
import pandas as pd

from talentpulse.models import ChurnPrediction, RiskLevel

_EMPTY_STAT = {"mean": 0.0, "min": 0.0, "max": 0.0, "std": 0.0}


def _stat(values: pd.Series) -> dict:
    if values.empty:
        return dict(_EMPTY_STAT)
    return {
        "mean": round(float(np.mean(values)), 4),
        "min":  round(float(np.min(values)),  4),
        "max":  round(float(np.max(values)),  4),
        "std":  round(float(np.std(values)),  4),
    }


def predictions_to_frame(predictions: Iterable[ChurnPrediction]) -> pd.DataFrame:
    columns = [
        "id", "employee_id", "prediction_date", "risk_score",
        "risk_level", "risk_factors", "confidence", "model_version",
    ]
    return pd.DataFrame([p.to_dict() for p in predictions], columns=columns)


def summarize_predictions(
    predictions: Iterable[ChurnPrediction],
    threshold: Optional[float] = None,
) -> dict:
    df = predictions_to_frame(predictions)

    level_counts = df["risk_level"].value_counts()
    risk_levels  = {level.value: int(level_counts.get(level.value, 0)) for level in RiskLevel}

    factors = df["risk_factors"].explode().dropna()
    top_factors = {factor: int(count) for factor, count in factors.value_counts().items()}

    summary = {
        "total":            len(df),
        "risk_levels":      risk_levels,
        "risk_score":       _stat(df["risk_score"]),
        "confidence":       _stat(df["confidence"]),
        "top_risk_factors": top_factors,
    }
    if threshold is not None:
        summary["flagged"] = int((df["risk_score"] >= threshold).sum())

    return summary
