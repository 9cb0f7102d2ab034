# talentpulse/models.py

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict
from sqlmodel import SQLModel, Field


class Employee(SQLModel):
    # Identity
    id: str
    name: str = Field(default="")
    email: Optional[str] = Field(default=None)
    department: str = Field(default="General")
    manager_id: Optional[str] = Field(default=None)

    # Employment
    hire_date: date
    exit_date: Optional[date] = Field(default=None)
    role: Optional[str] = Field(default=None)
    location: Optional[str] = Field(default=None)

    # Financial (annual)
    salary: Optional[float] = Field(default=None)


class PerformanceRecord(SQLModel):
    id: Optional[str] = Field(default=None)
    employee_id: str
    review_date: date
    rating: float                               # ~1-5
    comments: Optional[str] = Field(default=None)
    goals_met: Optional[bool] = Field(default=None)
    reviewer_id: Optional[str] = Field(default=None)


class EngagementRecord(SQLModel):
    id: Optional[str] = Field(default=None)
    employee_id: str
    survey_date: date
    overall_score: float                        # ~0-10

    # Optional survey sub-scores (same 0-10 scale)
    work_life_balance: Optional[float] = Field(default=None)
    career_development: Optional[float] = Field(default=None)
    compensation_satisfaction: Optional[float] = Field(default=None)
    manager_relationship: Optional[float] = Field(default=None)


class DepartmentContext(SQLModel):
    department: Optional[str] = Field(default=None)
    turnover_rate: Optional[float] = Field(default=None)


class RiskLevel(str, Enum):
    """Ordinal churn risk tiers."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @classmethod
    def from_score(cls, score: float) -> "RiskLevel":
        """Bucket a 0-1 risk score. Thresholds are inclusive lower bounds."""
        if score >= 0.8:
            return cls.CRITICAL
        elif score >= 0.6:
            return cls.HIGH
        elif score >= 0.3:
            return cls.MEDIUM
        return cls.LOW


class ChurnPrediction(BaseModel):
    """Scorer output. Created fresh per call and never mutated."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    id: str
    employee_id: str
    prediction_date: date
    risk_score: float
    risk_level: RiskLevel
    risk_factors: list[str]
    confidence: float
    model_version: str

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")
