"""
Fairness Audit Module

Measures how accurately the readmission classifier performs for demographic
subgroups and flags disparate performance ("bias") when the accuracy gap
between the two sides of an axis exceeds a threshold.

Default policy (reference behavior):
- Delivery Type axis: Vaginal vs Cesarean
- Location axis: Urban vs Rural
- Bias threshold: 10 percentage points

Accuracy is measured on the training cohort itself (no held-out split), so
it overstates real-world performance.
"""

from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
from dataclasses import dataclass, field
import logging

import numpy as np
from sklearn.metrics import accuracy_score

from maternity_readmission.cohort import DeliveryType, Location, PatientRecord
from maternity_readmission.exceptions import InvalidInputError, ModelNotFittedError
from maternity_readmission.features import encode_features

logger = logging.getLogger(__name__)

SubgroupPredicate = Callable[[PatientRecord], bool]

DEFAULT_BIAS_THRESHOLD = 10.0
NO_DATA = "n/a (no data)"


# ============================================================================
# POLICY
# ============================================================================

@dataclass(frozen=True)
class Subgroup:
    """A named demographic slice of the cohort."""
    name: str
    predicate: SubgroupPredicate


@dataclass(frozen=True)
class FairnessAxis:
    """Two subgroups whose accuracies are compared against each other."""
    name: str
    groups: Tuple[Subgroup, Subgroup]


def default_axes() -> List[FairnessAxis]:
    """Delivery type and location, the two axes audited by default."""
    return [
        FairnessAxis(
            name="Delivery Type",
            groups=(
                Subgroup("Vaginal", lambda p: p.delivery_type == DeliveryType.VAGINAL),
                Subgroup("Cesarean", lambda p: p.delivery_type == DeliveryType.CESAREAN),
            )
        ),
        FairnessAxis(
            name="Location",
            groups=(
                Subgroup("Urban", lambda p: p.location == Location.URBAN),
                Subgroup("Rural", lambda p: p.location == Location.RURAL),
            )
        ),
    ]


@dataclass
class AuditPolicy:
    """
    Threshold and axes used by the auditor.

    Attributes:
        threshold: Maximum tolerated accuracy gap in percentage points
        axes: Subgroup pairs to compare
    """
    threshold: float = DEFAULT_BIAS_THRESHOLD
    axes: List[FairnessAxis] = field(default_factory=default_axes)


# ============================================================================
# RESULTS
# ============================================================================

@dataclass
class SubgroupAccuracy:
    """Accuracy of the model on one subgroup; accuracy is None when empty."""
    name: str
    size: int
    correct: int
    accuracy: Optional[float]  # percentage, 0-100

    @property
    def has_data(self) -> bool:
        return self.accuracy is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'size': int(self.size),
            'correct': int(self.correct),
            'accuracy': None if self.accuracy is None else float(round(self.accuracy, 2))
        }


@dataclass
class AxisDisparity:
    """Accuracy gap between the two subgroups of an axis."""
    axis: str
    group_a: SubgroupAccuracy
    group_b: SubgroupAccuracy
    difference: Optional[float]
    threshold: float
    exceeds_threshold: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            'axis': self.axis,
            'groups': [self.group_a.to_dict(), self.group_b.to_dict()],
            'difference': None if self.difference is None else float(round(self.difference, 2)),
            'threshold': float(self.threshold),
            'exceeds_threshold': bool(self.exceeds_threshold)
        }


@dataclass
class AuditResult:
    """Complete fairness audit of one trained model on one cohort."""
    subgroups: Dict[str, SubgroupAccuracy]
    disparities: List[AxisDisparity]
    overall_accuracy: float
    majority_baseline: float
    threshold: float
    bias_detected: bool
    n_samples: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'summary': {
                'bias_detected': bool(self.bias_detected),
                'threshold': float(self.threshold),
                'n_samples': int(self.n_samples),
                'overall_accuracy': float(round(self.overall_accuracy, 2)),
                'majority_baseline': float(round(self.majority_baseline, 2))
            },
            'subgroups': {name: sg.to_dict() for name, sg in self.subgroups.items()},
            'disparities': [d.to_dict() for d in self.disparities]
        }


# ============================================================================
# AUDIT FUNCTIONS
# ============================================================================

def _score_subgroup(
    model: Any,
    records: Sequence[PatientRecord],
    predicate: SubgroupPredicate,
    name: str
) -> SubgroupAccuracy:
    if not model.is_fitted:
        raise ModelNotFittedError("Cannot audit a model that has not been fitted")

    members = [r for r in records if predicate(r)]
    if not members:
        logger.warning(f"No samples for subgroup {name}; accuracy reported as no data")
        return SubgroupAccuracy(name=name, size=0, correct=0, accuracy=None)

    X = np.array([encode_features(r) for r in members], dtype=float)
    y_true = np.array([1 if r.readmitted else 0 for r in members])
    y_pred = model.predict(X)

    correct = int(accuracy_score(y_true, y_pred, normalize=False))
    return SubgroupAccuracy(
        name=name,
        size=len(members),
        correct=correct,
        accuracy=correct / len(members) * 100
    )


def audit_subgroup(
    model: Any,
    records: Sequence[PatientRecord],
    predicate: SubgroupPredicate,
    name: Optional[str] = None
) -> Optional[float]:
    """
    Accuracy percentage of the model on the records matching `predicate`.

    Args:
        model: Fitted LogisticRegressionModel
        records: Cohort with ground-truth labels
        predicate: Selects the subgroup
        name: Label used in log messages (defaults to the predicate name)

    Returns:
        Accuracy in [0, 100], or None if no record matches

    Example:
        >>> acc = audit_subgroup(model, cohort, lambda p: p.location == Location.RURAL)
        >>> print("no data" if acc is None else f"{acc:.1f}%")
    """
    if name is None:
        name = getattr(predicate, '__name__', 'subgroup')
    return _score_subgroup(model, records, predicate, name).accuracy


def accuracy_difference(acc_a: Optional[float], acc_b: Optional[float]) -> Optional[float]:
    """Absolute accuracy gap; None if either side has no data."""
    if acc_a is None or acc_b is None:
        return None
    return abs(acc_a - acc_b)


class FairnessAuditor:
    """
    Audits subgroup accuracy of a trained model.

    The threshold and axes come from an AuditPolicy; the defaults reproduce
    the delivery type / location audit with a 10-point threshold.
    """

    def __init__(self, policy: Optional[AuditPolicy] = None):
        self.policy = policy if policy is not None else AuditPolicy()
        if self.policy.threshold < 0:
            raise InvalidInputError(f"Bias threshold must be non-negative, got {self.policy.threshold}")

    def audit(self, model: Any, records: Sequence[PatientRecord]) -> AuditResult:
        """
        Run the full audit.

        Args:
            model: Fitted LogisticRegressionModel
            records: Cohort the model is evaluated on

        Returns:
            AuditResult with per-subgroup accuracy, per-axis gaps and the bias flag
        """
        if len(records) == 0:
            raise InvalidInputError("Cannot audit an empty cohort")

        logger.info(f"Auditing subgroup accuracy over {len(records)} records "
                    f"(threshold: {self.policy.threshold:.1f} points)")

        overall = _score_subgroup(model, records, lambda p: True, "Overall")
        positive_rate = sum(1 for r in records if r.readmitted) / len(records)
        majority_baseline = max(positive_rate, 1 - positive_rate) * 100

        subgroups: Dict[str, SubgroupAccuracy] = {}
        disparities: List[AxisDisparity] = []

        for axis in self.policy.axes:
            group_a, group_b = (
                _score_subgroup(model, records, sg.predicate, sg.name) for sg in axis.groups
            )
            subgroups[group_a.name] = group_a
            subgroups[group_b.name] = group_b

            difference = accuracy_difference(group_a.accuracy, group_b.accuracy)
            exceeds = difference is not None and difference > self.policy.threshold

            disparities.append(AxisDisparity(
                axis=axis.name,
                group_a=group_a,
                group_b=group_b,
                difference=difference,
                threshold=self.policy.threshold,
                exceeds_threshold=exceeds
            ))

            if exceeds:
                logger.warning(f"Accuracy gap on {axis.name}: {difference:.1f} points "
                               f"({group_a.name} vs {group_b.name})")

        result = AuditResult(
            subgroups=subgroups,
            disparities=disparities,
            overall_accuracy=overall.accuracy,
            majority_baseline=majority_baseline,
            threshold=self.policy.threshold,
            bias_detected=any(d.exceeds_threshold for d in disparities),
            n_samples=len(records)
        )

        logger.info(f"Audit complete: bias_detected={result.bias_detected}")
        return result


def _format_accuracy(value: Optional[float]) -> str:
    return NO_DATA if value is None else f"{value:.1f}%"


def generate_audit_report(result: AuditResult) -> str:
    """
    Generate human-readable audit report.

    Args:
        result: Output from FairnessAuditor.audit

    Returns:
        Formatted text report
    """
    report = []
    report.append("=" * 70)
    report.append("FAIRNESS AUDIT REPORT - SUBGROUP ACCURACY")
    report.append("=" * 70)
    report.append("")
    report.append(f"Samples: {result.n_samples} (training cohort, no held-out split)")
    report.append(f"Overall Accuracy: {result.overall_accuracy:.1f}%")
    report.append(f"Majority-Class Baseline: {result.majority_baseline:.1f}%")
    report.append("")

    report.append("SUBGROUP ACCURACY:")
    report.append("-" * 70)
    for disparity in result.disparities:
        report.append(f"\n{disparity.axis}")
        for group in (disparity.group_a, disparity.group_b):
            report.append(f"  {group.name:<10} (n={group.size}): {_format_accuracy(group.accuracy)}")
        if disparity.difference is None:
            report.append(f"  Gap: {NO_DATA}")
        else:
            report.append(f"  Gap: {disparity.difference:.1f} points "
                          f"(threshold: <= {disparity.threshold:.1f})")
        report.append(f"  Status: {'[X] DISPARITY' if disparity.exceeds_threshold else '[OK] WITHIN THRESHOLD'}")

    report.append("")
    report.append("-" * 70)
    if result.bias_detected:
        report.append("VERDICT: [WARNING] Potential bias detected - accuracy gap exceeds threshold")
    else:
        report.append("VERDICT: [OK] No significant accuracy disparity detected")
    report.append("=" * 70)

    return "\n".join(report)
