# talentpulse/api/churn_routes.py

from datetime import date
from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from talentpulse.models import (
    ChurnPrediction,
    DepartmentContext,
    Employee,
    EngagementRecord,
    PerformanceRecord,
)
from talentpulse.ml.churn_predictor import ChurnPredictor, ChurnPredictionError
from talentpulse.ml.interventions import (
    DEFAULT_REPLACEMENT_COST,
    calculate_retention_roi,
    generate_actionable_insights,
    prioritize_interventions,
)
from talentpulse.ml.risk_report import summarize_predictions
from talentpulse.ml.scorer_config import ThresholdValidationError, load_scorer_config

router = APIRouter(prefix="/api/churn", tags=["Churn"])

# One scorer per process; the threshold is the only state it carries.
predictor = ChurnPredictor(load_scorer_config())


class PredictRequest(BaseModel):
    employee: Employee
    performance_history: list[PerformanceRecord] = []
    engagement_history: list[EngagementRecord] = []
    department: Optional[DepartmentContext] = None
    as_of: Optional[date] = None


class BatchRequest(BaseModel):
    employees: list[Employee]
    performance: list[PerformanceRecord] = []
    engagement: list[EngagementRecord] = []
    departments: dict[str, DepartmentContext] = {}
    as_of: Optional[date] = None


class ThresholdRequest(BaseModel):
    threshold: float


class InterventionRequest(BaseModel):
    predictions: list[ChurnPrediction]
    salaries: dict[str, float] = {}
    replacement_cost: float = Field(default=DEFAULT_REPLACEMENT_COST, ge=0, le=5)


@router.post("/predict")
def predict_endpoint(request: PredictRequest):
    try:
        prediction = predictor.predict(
            request.employee,
            request.performance_history,
            request.engagement_history,
            department=request.department,
            as_of=request.as_of,
        )
    except ChurnPredictionError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return prediction.to_dict()


@router.post("/batch")
def batch_predict_endpoint(request: BatchRequest):
    try:
        predictions = predictor.batch_predict(
            request.employees,
            request.performance,
            request.engagement,
            departments=request.departments,
            as_of=request.as_of,
        )
    except ChurnPredictionError as e:
        raise HTTPException(status_code=422, detail=str(e))

    threshold = predictor.get_risk_threshold()
    return {
        "predictions": [p.to_dict() for p in predictions],
        "summary":     summarize_predictions(predictions, threshold=threshold),
    }


@router.get("/threshold")
def get_threshold():
    return {"threshold": predictor.get_risk_threshold()}


@router.put("/threshold")
def set_threshold(request: ThresholdRequest):
    try:
        predictor.set_risk_threshold(request.threshold)
    except ThresholdValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"threshold": predictor.get_risk_threshold()}


@router.get("/metrics")
def model_metrics():
    return predictor.get_model_metrics()


@router.get("/feature-importance")
def feature_importance():
    return {"features": predictor.get_feature_importance()}


@router.post("/interventions")
def interventions(request: InterventionRequest):
    prioritized = prioritize_interventions(request.predictions)
    return {
        "interventions": [
            {
                "prediction": p.to_dict(),
                "actions":    generate_actionable_insights(p),
                "retention_roi": (
                    calculate_retention_roi(request.salaries[p.employee_id], request.replacement_cost)
                    if p.employee_id in request.salaries else None
                ),
            }
            for p in prioritized
        ],
    }
