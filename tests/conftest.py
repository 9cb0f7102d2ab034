"""Shared pytest fixtures for TalentPulse tests."""

from datetime import date, timedelta

import pytest

from talentpulse.models import (
    ChurnPrediction,
    DepartmentContext,
    Employee,
    EngagementRecord,
    PerformanceRecord,
    RiskLevel,
)
from talentpulse.ml.churn_predictor import ChurnPredictor

AS_OF = date(2026, 6, 1)


def months_ago(months: int) -> date:
    """Hire date that yields exactly ``months`` of tenure at AS_OF."""
    return AS_OF - timedelta(days=months * 30)


def make_prediction(employee_id: str, risk_score: float, factors=None, confidence: float = 0.9):
    return ChurnPrediction(
        id=f"pred-{employee_id}",
        employee_id=employee_id,
        prediction_date=AS_OF,
        risk_score=risk_score,
        risk_level=RiskLevel.from_score(risk_score),
        risk_factors=factors or ["Multiple minor risk indicators"],
        confidence=confidence,
        model_version="v1.2",
    )


@pytest.fixture
def as_of() -> date:
    return AS_OF


@pytest.fixture
def predictor() -> ChurnPredictor:
    return ChurnPredictor()


@pytest.fixture
def veteran() -> Employee:
    """72 months of tenure, salary at the 50th percentile."""
    return Employee(
        id="E-100",
        name="Dana Reyes",
        department="Engineering",
        hire_date=months_ago(72),
        salary=60000,
    )


@pytest.fixture
def declining_performance() -> list[PerformanceRecord]:
    return [
        PerformanceRecord(employee_id="E-100", review_date=date(2024, 3, 1), rating=4.5),
        PerformanceRecord(employee_id="E-100", review_date=date(2025, 3, 1), rating=4.0),
        PerformanceRecord(employee_id="E-100", review_date=date(2026, 3, 1), rating=3.5),
    ]


@pytest.fixture
def declining_engagement() -> list[EngagementRecord]:
    return [
        EngagementRecord(employee_id="E-100", survey_date=date(2025, 1, 15), overall_score=8),
        EngagementRecord(employee_id="E-100", survey_date=date(2025, 7, 15), overall_score=7),
        EngagementRecord(employee_id="E-100", survey_date=date(2026, 1, 15), overall_score=6),
    ]


@pytest.fixture
def low_turnover() -> DepartmentContext:
    return DepartmentContext(department="Engineering", turnover_rate=0.10)


@pytest.fixture
def steady_employee() -> Employee:
    """Two years in, no salary on file, no history. Trips no risk rule."""
    return Employee(id="E-200", department="Finance", hire_date=months_ago(24))
