"""
Maternity Readmission Simulator

Synthetic maternity cohort generation, a from-scratch logistic regression
readmission classifier, and a subgroup-accuracy fairness audit.
"""

__version__ = "1.0.0"

from maternity_readmission.cohort import (
    CohortGenerator,
    DeliveryType,
    Location,
    PatientRecord,
    generate_cohort,
)
from maternity_readmission.exceptions import (
    InvalidInputError,
    ModelNotFittedError,
    ReadmissionSimulatorError,
)
from maternity_readmission.fairness_audit import (
    AuditPolicy,
    FairnessAuditor,
    audit_subgroup,
)
from maternity_readmission.features import encode_features
from maternity_readmission.logistic_regression import LogisticRegressionModel, sigmoid

__all__ = [
    "CohortGenerator",
    "DeliveryType",
    "Location",
    "PatientRecord",
    "generate_cohort",
    "encode_features",
    "LogisticRegressionModel",
    "sigmoid",
    "FairnessAuditor",
    "AuditPolicy",
    "audit_subgroup",
    "ReadmissionSimulatorError",
    "InvalidInputError",
    "ModelNotFittedError",
]
