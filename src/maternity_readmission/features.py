"""
Feature encoding for the readmission classifier.

The same encoding must be used when building the training matrix and when
scoring a single what-if patient; the model's weights are positional.
"""

from typing import Any, List, Sequence, Tuple
import logging

import numpy as np

from maternity_readmission.cohort import DeliveryType, Location, PatientRecord
from maternity_readmission.exceptions import InvalidInputError

logger = logging.getLogger(__name__)

FEATURE_NAMES = [
    'age',
    'delivery_type',
    'labor_duration',
    'complications',
    'length_of_stay',
    'location',
]

# Fixed normalization bounds, not fitted to the data
AGE_SCALE = 45.0
LABOR_DURATION_SCALE = 24.0
LENGTH_OF_STAY_SCALE = 10.0


def encode_features(record: Any) -> List[float]:
    """
    Encode one patient as a 6-element feature vector.

    Accepts any object exposing the PatientRecord attributes (a generated
    record or a what-if PatientProfile). Values are scaled, never clamped.

    Args:
        record: Patient with age, delivery_type, labor_duration_hours,
            has_complications, length_of_stay_days and location

    Returns:
        [age/45, is_cesarean, labor/24, has_complications, los/10, is_rural]
    """
    return [
        record.age / AGE_SCALE,
        1.0 if DeliveryType(record.delivery_type) == DeliveryType.CESAREAN else 0.0,
        record.labor_duration_hours / LABOR_DURATION_SCALE,
        1.0 if record.has_complications else 0.0,
        record.length_of_stay_days / LENGTH_OF_STAY_SCALE,
        1.0 if Location(record.location) == Location.RURAL else 0.0,
    ]


def build_training_set(records: Sequence[PatientRecord]) -> Tuple[np.ndarray, np.ndarray]:
    """
    Stack encoded records and their ground-truth labels.

    Returns:
        Tuple of (X with shape [n, 6], y with shape [n] of 0/1)
    """
    if len(records) == 0:
        raise InvalidInputError("Cannot build a training set from an empty cohort")

    X = np.array([encode_features(r) for r in records], dtype=float)
    y = np.array([1 if r.readmitted else 0 for r in records], dtype=int)

    logger.debug(f"Built training matrix {X.shape}, positive rate {y.mean():.3f}")
    return X, y
