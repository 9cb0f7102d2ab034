# talentpulse/ml/scorer_config.py

import json
import logging
import os
from dataclasses import dataclass, fields

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR      = "TALENTPULSE_SCORER_CONFIG"
DEFAULT_CONFIG_PATH = "talentpulse/ml/exports/scorer_config.json"


class ThresholdValidationError(ValueError):
    """Risk threshold outside [0, 1]."""


def validate_threshold(value) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ThresholdValidationError(f"Threshold must be a number, got {value!r}")
    if value != value or value < 0 or value > 1:
        raise ThresholdValidationError("Threshold must be between 0 and 1")
    return float(value)


@dataclass
class ScorerConfig:
    model_version:         str   = "v1.2"
    risk_threshold:        float = 0.5
    default_turnover_rate: float = 0.15
    salary_benchmark:      float = 120000.0

    def __post_init__(self):
        self.risk_threshold = validate_threshold(self.risk_threshold)
        if self.salary_benchmark <= 0:
            raise ValueError(f"salary_benchmark must be positive, got {self.salary_benchmark}")


def load_scorer_config(path: str = None) -> ScorerConfig:
    """
    Load scorer settings from JSON.
    Lookup order: explicit path → $TALENTPULSE_SCORER_CONFIG → exports default.
    A missing file means defaults; unknown keys are ignored.
    """
    path = path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH

    try:
        with open(path) as f:
            raw = json.load(f)
    except FileNotFoundError:
        return ScorerConfig()
    except json.JSONDecodeError as e:
        logger.warning("Could not parse scorer config %s (%s); using defaults", path, e)
        return ScorerConfig()

    if not isinstance(raw, dict):
        logger.warning("Scorer config %s is not a JSON object; using defaults", path)
        return ScorerConfig()

    known ={f.name for f in fields(ScorerConfig)}
    ignored = sorted(set(raw) - known)
    if ignored:
        logger.warning("Ignoring unknown scorer config keys: %s", ignored)

    return ScorerConfig(**{k: v for k, v in raw.items() if k in known})
