"""Tests for scorer configuration loading."""

import json

import pytest

from talentpulse.ml.churn_predictor import ChurnPredictor
from talentpulse.ml.scorer_config import (
    CONFIG_ENV_VAR,
    ScorerConfig,
    ThresholdValidationError,
    load_scorer_config,
)


@pytest.fixture(autouse=True)
def _no_env_config(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


class TestScorerConfig:

    def test_defaults(self):
        config = ScorerConfig()
        assert config.model_version == "v1.2"
        assert config.risk_threshold == 0.5
        assert config.default_turnover_rate == 0.15
        assert config.salary_benchmark == 120000.0

    def test_rejects_bad_threshold(self):
        with pytest.raises(ThresholdValidationError):
            ScorerConfig(risk_threshold=2)

    def test_rejects_non_positive_benchmark(self):
        with pytest.raises(ValueError):
            ScorerConfig(salary_benchmark=0)

    def test_predictor_uses_config(self):
        predictor = ChurnPredictor(ScorerConfig(risk_threshold=0.7, model_version="v2.0"))
        assert predictor.get_risk_threshold() == 0.7
        assert predictor.model_version == "v2.0"


class TestLoadScorerConfig:

    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_scorer_config(str(tmp_path / "absent.json")) == ScorerConfig()

    def test_loads_file(self, tmp_path):
        path = tmp_path / "scorer.json"
        path.write_text(json.dumps({"risk_threshold": 0.35, "default_turnover_rate": 0.2}))
        config = load_scorer_config(str(path))
        assert config.risk_threshold == 0.35
        assert config.default_turnover_rate == 0.2
        assert config.model_version == "v1.2"

    def test_unknown_keys_ignored(self, tmp_path):
        path = tmp_path / "scorer.json"
        path.write_text(json.dumps({"risk_threshold": 0.4, "weights": {"tenure_months": 1}}))
        assert load_scorer_config(str(path)).risk_threshold == 0.4

    def test_env_var(self, tmp_path, monkeypatch):
        path = tmp_path / "from_env.json"
        path.write_text(json.dumps({"model_version": "v1.2-env"}))
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
        assert load_scorer_config().model_version == "v1.2-env"

    def test_malformed_json_falls_back(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        assert load_scorer_config(str(path)) == ScorerConfig()

    @pytest.mark.parametrize("payload", ["[]", "3", '"text"', "null", '[["risk_threshold", 0.9]]'])
    def test_non_object_json_falls_back(self, tmp_path, payload):
        path = tmp_path / "scorer.json"
        path.write_text(payload)
        assert load_scorer_config(str(path)) == ScorerConfig()

    def test_invalid_threshold_in_file_raises(self, tmp_path):
        path = tmp_path / "scorer.json"
        path.write_text(json.dumps({"risk_threshold": -1}))
        with pytest.raises(ThresholdValidationError):
            load_scorer_config(str(path))
