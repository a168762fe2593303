"""Unit tests for what-if risk assessment."""

import pytest
from pydantic import ValidationError

from maternity_readmission.cohort import DeliveryType, Location
from maternity_readmission.exceptions import ModelNotFittedError
from maternity_readmission.logistic_regression import LogisticRegressionModel
from maternity_readmission.risk_assessment import (
    PatientProfile,
    RiskLevel,
    assess_patient,
    classify_risk,
)


class TestClassifyRisk:
    """Test suite for risk banding."""

    @pytest.mark.parametrize("probability, expected", [
        (0.0, RiskLevel.LOW),
        (0.3, RiskLevel.LOW),
        (0.31, RiskLevel.MODERATE),
        (0.6, RiskLevel.MODERATE),
        (0.61, RiskLevel.HIGH),
        (0.99, RiskLevel.HIGH),
    ])
    def test_bands(self, probability, expected):
        assert classify_risk(probability) == expected


class TestPatientProfile:
    """Test suite for what-if input validation."""

    def test_defaults(self):
        profile = PatientProfile()

        assert profile.age == 28
        assert profile.delivery_type == DeliveryType.VAGINAL
        assert profile.location == Location.URBAN
        assert profile.length_of_stay_days == 3

    def test_string_enums_are_coerced(self):
        profile = PatientProfile(delivery_type="Cesarean", location="Rural")

        assert profile.delivery_type == DeliveryType.CESAREAN
        assert profile.location == Location.RURAL

    @pytest.mark.parametrize("field, value", [
        ('age', 17),
        ('age', 46),
        ('labor_duration_hours', 0.5),
        ('labor_duration_hours', 25),
        ('length_of_stay_days', 0),
        ('length_of_stay_days', 11),
        ('delivery_type', "Forceps"),
        ('location', "Suburban"),
    ])
    def test_out_of_range_rejected(self, field, value):
        with pytest.raises(ValidationError):
            PatientProfile(**{field: value})


class TestAssessPatient:
    """Test suite for assess_patient."""

    def test_constant_model_gives_moderate_risk(self, constant_model):
        assessment = assess_patient(constant_model, PatientProfile())

        assert assessment.probability == 0.5
        assert assessment.predicted_label == 1
        assert assessment.risk_level == RiskLevel.MODERATE
        assert "monitoring" in assessment.recommendation

    def test_trained_model_scores_profile(self, trained_model):
        profile = PatientProfile(age=40, delivery_type="Cesarean", labor_duration_hours=14,
                                 has_complications=True, length_of_stay_days=6, location="Rural")

        assessment = assess_patient(trained_model, profile)

        assert 0.0 < assessment.probability < 1.0
        assert assessment.risk_level == classify_risk(assessment.probability)
        assert assessment.to_dict()['risk_level'] == assessment.risk_level.value

    def test_unfitted_model_raises(self):
        with pytest.raises(ModelNotFittedError):
            assess_patient(LogisticRegressionModel(), PatientProfile())
