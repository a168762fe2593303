"""Unit tests for the subgroup fairness audit.

Most tests use the zero-iteration model, which labels every patient as
readmitted, so subgroup accuracy equals the subgroup's readmission rate.
"""

import json
import logging

import pytest

from maternity_readmission.cohort import DeliveryType, Location
from maternity_readmission.exceptions import InvalidInputError, ModelNotFittedError
from maternity_readmission.fairness_audit import (
    AuditPolicy,
    FairnessAuditor,
    FairnessAxis,
    Subgroup,
    accuracy_difference,
    audit_subgroup,
    generate_audit_report,
)
from maternity_readmission.features import build_training_set
from maternity_readmission.logistic_regression import LogisticRegressionModel


@pytest.fixture
def skewed_cohort(record_factory):
    """Vaginal 50% readmitted, Cesarean 100% readmitted, everyone urban."""
    return [
        record_factory(id=1, readmitted=True),
        record_factory(id=2, readmitted=True),
        record_factory(id=3, readmitted=False),
        record_factory(id=4, readmitted=False),
        record_factory(id=5, delivery_type=DeliveryType.CESAREAN, readmitted=True),
        record_factory(id=6, delivery_type=DeliveryType.CESAREAN, readmitted=True),
    ]


class TestAuditSubgroup:
    """Test suite for audit_subgroup."""

    def test_accuracy_percentage(self, constant_model, skewed_cohort):
        acc = audit_subgroup(constant_model, skewed_cohort,
                             lambda p: p.delivery_type == DeliveryType.VAGINAL)

        assert acc == pytest.approx(50.0)

    def test_all_records(self, constant_model, skewed_cohort):
        acc = audit_subgroup(constant_model, skewed_cohort, lambda p: True)

        assert acc == pytest.approx(4 / 6 * 100)

    def test_empty_subgroup_reports_no_data(self, constant_model, skewed_cohort):
        acc = audit_subgroup(constant_model, skewed_cohort,
                             lambda p: p.location == Location.RURAL)

        assert acc is None

    def test_empty_subgroup_logged_under_given_name(self, constant_model, skewed_cohort, caplog):
        with caplog.at_level(logging.WARNING, logger="maternity_readmission.fairness_audit"):
            audit_subgroup(constant_model, skewed_cohort,
                           lambda p: p.location == Location.RURAL, name="Rural")

        assert "No samples for subgroup Rural" in caplog.text
        assert "<lambda>" not in caplog.text

    def test_matches_per_record_predictions(self, trained_model, seeded_cohort):
        predicate = lambda p: p.location == Location.RURAL  # noqa: E731
        members = [p for p in seeded_cohort if predicate(p)]
        X, y = build_training_set(members)
        correct = sum(
            1 for row, label in zip(X, y) if trained_model.predict_label(row) == label
        )

        acc = audit_subgroup(trained_model, seeded_cohort, predicate)

        assert acc == pytest.approx(correct / len(members) * 100)

    def test_unfitted_model_raises(self, skewed_cohort):
        with pytest.raises(ModelNotFittedError):
            audit_subgroup(LogisticRegressionModel(), skewed_cohort, lambda p: True)


class TestAccuracyDifference:
    """Test suite for accuracy_difference."""

    def test_symmetric(self):
        assert accuracy_difference(72.5, 90.0) == accuracy_difference(90.0, 72.5) == 17.5

    def test_missing_side_is_none(self):
        assert accuracy_difference(None, 80.0) is None
        assert accuracy_difference(80.0, None) is None


class TestFairnessAuditor:
    """Test suite for FairnessAuditor.audit."""

    def test_flags_gap_above_threshold(self, constant_model, skewed_cohort):
        result = FairnessAuditor().audit(constant_model, skewed_cohort)

        delivery = result.disparities[0]
        assert delivery.axis == "Delivery Type"
        assert delivery.group_a.accuracy == pytest.approx(50.0)
        assert delivery.group_b.accuracy == pytest.approx(100.0)
        assert delivery.difference == pytest.approx(50.0)
        assert delivery.exceeds_threshold
        assert result.bias_detected

    def test_empty_axis_side_is_not_flagged(self, constant_model, skewed_cohort):
        result = FairnessAuditor().audit(constant_model, skewed_cohort)

        location = result.disparities[1]
        assert location.axis == "Location"
        assert location.group_b.name == "Rural"
        assert not location.group_b.has_data
        assert location.difference is None
        assert not location.exceeds_threshold

    def test_gap_equal_to_threshold_is_not_flagged(self, constant_model, skewed_cohort):
        result = FairnessAuditor(AuditPolicy(threshold=50.0)).audit(constant_model, skewed_cohort)

        assert not result.bias_detected

    def test_overall_accuracy_and_baseline(self, constant_model, skewed_cohort):
        result = FairnessAuditor().audit(constant_model, skewed_cohort)

        assert result.overall_accuracy == pytest.approx(4 / 6 * 100)
        assert result.majority_baseline == pytest.approx(4 / 6 * 100)
        assert result.n_samples == 6

    def test_subgroups_indexed_by_name(self, constant_model, skewed_cohort):
        result = FairnessAuditor().audit(constant_model, skewed_cohort)

        assert set(result.subgroups) == {"Vaginal", "Cesarean", "Urban", "Rural"}
        assert result.subgroups["Cesarean"].size == 2
        assert result.subgroups["Cesarean"].correct == 2

    def test_custom_axis(self, constant_model, skewed_cohort):
        policy = AuditPolicy(
            threshold=5.0,
            axes=[FairnessAxis(
                name="Record Parity",
                groups=(
                    Subgroup("Odd", lambda p: p.id % 2 == 1),
                    Subgroup("Even", lambda p: p.id % 2 == 0),
                )
            )]
        )

        result = FairnessAuditor(policy).audit(constant_model, skewed_cohort)

        # Odd ids 1,3,5 -> 2/3 readmitted; even ids 2,4,6 -> 2/3 readmitted
        assert len(result.disparities) == 1
        assert result.disparities[0].difference == pytest.approx(0.0)
        assert not result.bias_detected

    def test_default_audit_on_generated_cohort(self, trained_model, seeded_cohort):
        result = FairnessAuditor().audit(trained_model, seeded_cohort)

        assert 0.0 <= result.overall_accuracy <= 100.0
        for disparity in result.disparities:
            assert disparity.difference == pytest.approx(
                abs(disparity.group_a.accuracy - disparity.group_b.accuracy)
            )
        assert result.bias_detected == any(
            d.difference > 10.0 for d in result.disparities
        )

    def test_to_dict_is_json_serializable(self, constant_model, skewed_cohort):
        result = FairnessAuditor().audit(constant_model, skewed_cohort)

        payload = json.loads(json.dumps(result.to_dict()))

        assert payload['summary']['bias_detected'] is True
        assert payload['subgroups']['Rural']['accuracy'] is None

    def test_empty_cohort_raises(self, constant_model):
        with pytest.raises(InvalidInputError):
            FairnessAuditor().audit(constant_model, [])

    def test_negative_threshold_raises(self):
        with pytest.raises(InvalidInputError):
            FairnessAuditor(AuditPolicy(threshold=-1.0))


class TestAuditReport:
    """Test suite for generate_audit_report."""

    def test_report_contents(self, constant_model, skewed_cohort):
        result = FairnessAuditor().audit(constant_model, skewed_cohort)

        report = generate_audit_report(result)

        assert "FAIRNESS AUDIT REPORT" in report
        assert "Delivery Type" in report
        assert "50.0 points" in report
        assert "n/a (no data)" in report
        assert "Potential bias detected" in report

    def test_report_without_bias(self, constant_model, record_factory):
        cohort = [
            record_factory(id=1, readmitted=True),
            record_factory(id=2, delivery_type=DeliveryType.CESAREAN, location=Location.RURAL,
                           readmitted=True),
        ]

        report = generate_audit_report(FairnessAuditor().audit(constant_model, cohort))

        assert "No significant accuracy disparity" in report
