"""
Shared pytest configuration and fixtures.
"""

import numpy as np
import pytest

from maternity_readmission.cohort import DeliveryType, Location, PatientRecord, generate_cohort
from maternity_readmission.features import build_training_set
from maternity_readmission.logistic_regression import LogisticRegressionModel


def make_record(**overrides) -> PatientRecord:
    """Build a PatientRecord with sensible defaults for the fields not given."""
    values = {
        'id': 1,
        'age': 28,
        'delivery_type': DeliveryType.VAGINAL,
        'labor_duration_hours': 12,
        'has_complications': False,
        'length_of_stay_days': 3,
        'location': Location.URBAN,
        'readmitted': False,
    }
    values.update(overrides)
    return PatientRecord(**values)


@pytest.fixture
def record_factory():
    """Return the make_record helper."""
    return make_record


@pytest.fixture(scope="session")
def seeded_cohort():
    """A reproducible 500-patient cohort."""
    return generate_cohort(500, seed=42)


@pytest.fixture(scope="session")
def trained_model(seeded_cohort):
    """Model trained with the default hyperparameters on the seeded cohort."""
    X, y = build_training_set(seeded_cohort)
    return LogisticRegressionModel().fit(X, y)


@pytest.fixture
def constant_model():
    """
    Model fitted with zero iterations: every probability is exactly 0.5,
    so every predicted label is 1.
    """
    return LogisticRegressionModel(iterations=0).fit([[0.0] * 6], [0])


@pytest.fixture
def separable_data():
    """Learnable dataset: label depends on features 0 and 3."""
    rng = np.random.default_rng(0)
    X = rng.random((400, 6))
    y = (X[:, 0] + X[:, 3] > 1.0).astype(int)
    return X, y
