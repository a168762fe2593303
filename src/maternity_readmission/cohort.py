"""
Synthetic Maternity Cohort Generator

Produces labeled patient records from a hand-specified additive readmission
risk model. The ground-truth label is drawn once per record and is the
supervised target for the classifier; it is never recomputed.

Risk factors (added to a 5% base):
- Cesarean delivery (+15%)
- Complications (+25%)
- Rural location (+10%)
- Maternal age > 35 (+10%)
- Vaginal delivery discharged in under 3 days (+15%)
"""

from typing import Dict, List, Optional, Sequence
from dataclasses import dataclass, field
from enum import Enum
import logging

import numpy as np
import pandas as pd

from maternity_readmission.exceptions import InvalidInputError

logger = logging.getLogger(__name__)


# ============================================================================
# DATA STRUCTURES
# ============================================================================

class DeliveryType(Enum):
    """Mode of delivery."""
    VAGINAL = "Vaginal"
    CESAREAN = "Cesarean"


class Location(Enum):
    """Residence of the patient."""
    URBAN = "Urban"
    RURAL = "Rural"


@dataclass(frozen=True)
class PatientRecord:
    """One synthetic maternity patient with the ground-truth outcome."""
    id: int
    age: int
    delivery_type: DeliveryType
    labor_duration_hours: int
    has_complications: bool
    length_of_stay_days: int
    location: Location
    readmitted: bool  # ground truth, drawn at generation time

    def to_dict(self) -> Dict[str, object]:
        """Convert to a flat dictionary with plain values."""
        return {
            'id': self.id,
            'age': self.age,
            'delivery_type': self.delivery_type.value,
            'labor_duration_hours': self.labor_duration_hours,
            'has_complications': self.has_complications,
            'length_of_stay_days': self.length_of_stay_days,
            'location': self.location.value,
            'readmitted': self.readmitted
        }


@dataclass
class CohortSummary:
    """Descriptive statistics of a generated cohort."""
    total: int
    readmitted_count: int
    readmission_rate: float
    cesarean_count: int
    mean_age: float
    age_distribution: Dict[str, int]
    delivery_stats: Dict[str, Dict[str, float]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, object]:
        return {
            'total': int(self.total),
            'readmitted_count': int(self.readmitted_count),
            'readmission_rate': float(round(self.readmission_rate, 4)),
            'cesarean_count': int(self.cesarean_count),
            'mean_age': float(round(self.mean_age, 2)),
            'age_distribution': dict(self.age_distribution),
            'delivery_stats': {
                name: dict(stats) for name, stats in self.delivery_stats.items()
            }
        }


# ============================================================================
# GENERATION PARAMETERS
# ============================================================================

AGE_RANGE = (18, 45)
LABOR_DURATION_RANGE = (4, 23)

CESAREAN_PROBABILITY = 0.3
URBAN_PROBABILITY = 0.6
COMPLICATION_PROBABILITY = 0.2

BASE_READMISSION_RISK = 0.05
CESAREAN_RISK = 0.15
COMPLICATION_RISK = 0.25
RURAL_RISK = 0.10
ADVANCED_AGE_RISK = 0.10
EARLY_DISCHARGE_RISK = 0.15

ADVANCED_AGE_THRESHOLD = 35
EARLY_DISCHARGE_DAYS = 3
AGE_BAND_WIDTH = 5


def derive_length_of_stay(
    delivery_type: DeliveryType,
    has_complications: bool,
    extra_day: int
) -> int:
    """
    Length of stay in days: 2 (vaginal) or 4 (cesarean), plus 2 with
    complications, plus `extra_day` (0 or 1).
    """
    los = 4 if delivery_type == DeliveryType.CESAREAN else 2
    if has_complications:
        los += 2
    return los + extra_day


def ground_truth_probability(
    age: int,
    delivery_type: DeliveryType,
    has_complications: bool,
    length_of_stay_days: int,
    location: Location
) -> float:
    """
    Compute the simulated readmission probability for one patient.

    The risk is a plain sum of fixed increments and is NOT clamped to [0, 1].
    The early-discharge increment only applies to vaginal deliveries, so it
    never stacks with the cesarean increment and the largest reachable value
    is 0.65; callers must not rely on that bound if the increments change.

    Args:
        age: Maternal age in years
        delivery_type: Mode of delivery
        has_complications: Whether complications occurred
        length_of_stay_days: Length of the delivery admission
        location: Urban or rural residence

    Returns:
        Probability of readmission used for the Bernoulli draw
    """
    prob = BASE_READMISSION_RISK
    if delivery_type == DeliveryType.CESAREAN:
        prob += CESAREAN_RISK
    if has_complications:
        prob += COMPLICATION_RISK
    if location == Location.RURAL:
        prob += RURAL_RISK
    if age > ADVANCED_AGE_THRESHOLD:
        prob += ADVANCED_AGE_RISK
    if delivery_type == DeliveryType.VAGINAL and length_of_stay_days < EARLY_DISCHARGE_DAYS:
        prob += EARLY_DISCHARGE_RISK
    return prob


# ============================================================================
# GENERATOR
# ============================================================================

class CohortGenerator:
    """
    Generates independent, identically distributed synthetic patients.

    Randomness comes from an explicit numpy Generator so a run can be
    reproduced by fixing the seed. Without a generator or seed the draws are
    unseeded.
    """

    def __init__(
        self,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize the generator.

        Args:
            rng: Random source to draw from (takes precedence over seed)
            seed: Seed for a new numpy Generator when rng is not given
        """
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def generate(self, count: int) -> List[PatientRecord]:
        """
        Generate `count` patient records with ids 1..count.

        Args:
            count: Number of records (positive integer)

        Returns:
            List of PatientRecord

        Example:
            >>> cohort = CohortGenerator(seed=42).generate(500)
            >>> print(f"Readmitted: {sum(p.readmitted for p in cohort)}")
        """
        if isinstance(count, bool) or not isinstance(count, (int, np.integer)) or count <= 0:
            raise InvalidInputError(f"Cohort size must be a positive integer, got {count!r}")

        records = [self._generate_record(i + 1) for i in range(int(count))]

        readmitted = sum(1 for r in records if r.readmitted)
        logger.info(f"Generated cohort of {len(records)} patients ({readmitted} readmitted)")
        return records

    def _generate_record(self, record_id: int) -> PatientRecord:
        rng = self.rng

        age = int(rng.integers(AGE_RANGE[0], AGE_RANGE[1] + 1))
        delivery_type = (
            DeliveryType.CESAREAN if rng.random() < CESAREAN_PROBABILITY
            else DeliveryType.VAGINAL
        )
        location = Location.URBAN if rng.random() < URBAN_PROBABILITY else Location.RURAL
        labor_duration = int(rng.integers(LABOR_DURATION_RANGE[0], LABOR_DURATION_RANGE[1] + 1))
        has_complications = bool(rng.random() < COMPLICATION_PROBABILITY)

        los = derive_length_of_stay(delivery_type, has_complications, int(rng.integers(0, 2)))

        prob = ground_truth_probability(age, delivery_type, has_complications, los, location)
        readmitted = bool(rng.random() < prob)

        return PatientRecord(
            id=record_id,
            age=age,
            delivery_type=delivery_type,
            labor_duration_hours=labor_duration,
            has_complications=has_complications,
            length_of_stay_days=los,
            location=location,
            readmitted=readmitted
        )


def generate_cohort(
    count: int = 500,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None
) -> List[PatientRecord]:
    """
    Convenience function to generate a cohort.

    This is the main entry point for data generation in the pipeline.
    """
    return CohortGenerator(rng=rng, seed=seed).generate(count)


# ============================================================================
# COHORT ANALYSIS
# ============================================================================

def cohort_to_frame(records: Sequence[PatientRecord]) -> pd.DataFrame:
    """Tabulate records, one row per patient, enums as plain strings."""
    columns = [
        'id', 'age', 'delivery_type', 'labor_duration_hours',
        'has_complications', 'length_of_stay_days', 'location', 'readmitted'
    ]
    return pd.DataFrame([r.to_dict() for r in records], columns=columns)


def summarize_cohort(records: Sequence[PatientRecord]) -> CohortSummary:
    """
    Compute descriptive statistics for a cohort.

    Age is bucketed into 5-year bands starting at 18 (18-22 ... 43-47).
    Readmission rates are fractions in [0, 1]; a delivery type with no
    patients gets a rate of 0.0.

    Args:
        records: Generated cohort

    Returns:
        CohortSummary
    """
    if len(records) == 0:
        raise InvalidInputError("Cannot summarize an empty cohort")

    df = cohort_to_frame(records)

    age_distribution = {}
    n_bands = (AGE_RANGE[1] - AGE_RANGE[0]) // AGE_BAND_WIDTH + 1
    for i in range(n_bands):
        low = AGE_RANGE[0] + i * AGE_BAND_WIDTH
        high = low + AGE_BAND_WIDTH - 1
        age_distribution[f"{low}-{high}"] = int(df['age'].between(low, high).sum())

    delivery_stats = {}
    for delivery_type in DeliveryType:
        group = df[df['delivery_type'] == delivery_type.value]
        total = len(group)
        readmitted = int(group['readmitted'].sum())
        delivery_stats[delivery_type.value] = {
            'total': total,
            'readmitted': readmitted,
            'rate': readmitted / total if total > 0 else 0.0
        }

    return CohortSummary(
        total=len(df),
        readmitted_count=int(df['readmitted'].sum()),
        readmission_rate=float(df['readmitted'].mean()),
        cesarean_count=int((df['delivery_type'] == DeliveryType.CESAREAN.value).sum()),
        mean_age=float(df['age'].mean()),
        age_distribution=age_distribution,
        delivery_stats=delivery_stats
    )
