"""
What-if risk assessment for a single patient.

Scores a hand-entered patient profile with a trained model and translates the
probability into a risk band with a follow-up recommendation.
"""

from typing import Any, Dict
from dataclasses import dataclass
from enum import Enum
import logging

from pydantic import BaseModel, Field

from maternity_readmission.cohort import DeliveryType, Location
from maternity_readmission.features import encode_features

logger = logging.getLogger(__name__)

HIGH_RISK_THRESHOLD = 0.6
MODERATE_RISK_THRESHOLD = 0.3


class RiskLevel(Enum):
    """Readmission risk bands."""
    LOW = "Low Risk"
    MODERATE = "Moderate Risk"
    HIGH = "High Risk"


RECOMMENDATIONS = {
    RiskLevel.HIGH: "Immediate follow-up care and home visits recommended.",
    RiskLevel.MODERATE: "Standard post-discharge monitoring required.",
    RiskLevel.LOW: "Standard post-discharge monitoring required.",
}


class PatientProfile(BaseModel):
    """Patient details entered for a what-if prediction."""
    age: int = Field(28, ge=18, le=45, description="Maternal age in years")
    delivery_type: DeliveryType = Field(DeliveryType.VAGINAL, description="Mode of delivery")
    labor_duration_hours: float = Field(12, ge=1, le=24, description="Duration of labor in hours")
    has_complications: bool = Field(False, description="Complications during delivery")
    length_of_stay_days: int = Field(3, ge=1, le=10, description="Length of stay in days")
    location: Location = Field(Location.URBAN, description="Urban or rural residence")


@dataclass
class RiskAssessment:
    """Model output for one what-if patient."""
    probability: float
    predicted_label: int
    risk_level: RiskLevel
    recommendation: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'probability': float(round(self.probability, 4)),
            'predicted_label': int(self.predicted_label),
            'risk_level': self.risk_level.value,
            'recommendation': self.recommendation
        }


def classify_risk(probability: float) -> RiskLevel:
    """High above 0.6, Moderate above 0.3, otherwise Low."""
    if probability > HIGH_RISK_THRESHOLD:
        return RiskLevel.HIGH
    if probability > MODERATE_RISK_THRESHOLD:
        return RiskLevel.MODERATE
    return RiskLevel.LOW


def assess_patient(model: Any, profile: PatientProfile) -> RiskAssessment:
    """
    Score a what-if patient with a fitted model.

    Args:
        model: Fitted LogisticRegressionModel
        profile: Validated patient details

    Returns:
        RiskAssessment with probability, label, band and recommendation
    """
    features = encode_features(profile)
    probability = model.predict_probability(features)
    label = model.predict_label(features)
    level = classify_risk(probability)

    logger.info(f"What-if prediction: {probability:.1%} ({level.value})")

    return RiskAssessment(
        probability=probability,
        predicted_label=label,
        risk_level=level,
        recommendation=RECOMMENDATIONS[level]
    )
