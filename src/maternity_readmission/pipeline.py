"""
Readmission Simulation Pipeline

Orchestrates one simulation run:
1. Generate the synthetic cohort
2. Encode features and train the logistic regression model
3. Audit subgroup accuracy for disparate performance
"""

from typing import Any, Dict, List, Optional
from dataclasses import dataclass
import logging

import numpy as np

from maternity_readmission.cohort import (
    CohortGenerator,
    CohortSummary,
    PatientRecord,
    summarize_cohort,
)
from maternity_readmission.config import SimulationConfig
from maternity_readmission.fairness_audit import AuditPolicy, AuditResult, FairnessAuditor
from maternity_readmission.features import build_training_set
from maternity_readmission.logistic_regression import LogisticRegressionModel
from maternity_readmission.risk_assessment import PatientProfile, RiskAssessment, assess_patient

logger = logging.getLogger(__name__)


@dataclass
class SimulationResult:
    """Everything produced by one pipeline run."""
    config: SimulationConfig
    cohort: List[PatientRecord]
    summary: CohortSummary
    model: LogisticRegressionModel
    audit: AuditResult

    def to_dict(self) -> Dict[str, Any]:
        return {
            'config': self.config.to_dict(),
            'summary': self.summary.to_dict(),
            'model': {
                'weights': [float(w) for w in self.model.weights],
                'bias': float(self.model.bias)
            },
            'audit': self.audit.to_dict()
        }


class ReadmissionPipeline:
    """
    Runs generation, training and auditing with one configuration.
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        rng: Optional[np.random.Generator] = None
    ):
        """
        Initialize the pipeline.

        Args:
            config: Run parameters (defaults to SimulationConfig())
            rng: Optional random source; overrides config.seed
        """
        self.config = config if config is not None else SimulationConfig()
        self.generator = CohortGenerator(rng=rng, seed=self.config.seed)
        self.auditor = FairnessAuditor(AuditPolicy(threshold=self.config.bias_threshold))
        self.result: Optional[SimulationResult] = None

    def generate(self) -> List[PatientRecord]:
        logger.info("=" * 70)
        logger.info("STEP 1: COHORT GENERATION")
        logger.info("=" * 70)
        return self.generator.generate(self.config.cohort_size)

    def train(self, cohort: List[PatientRecord]) -> LogisticRegressionModel:
        logger.info("=" * 70)
        logger.info("STEP 2: MODEL TRAINING")
        logger.info("=" * 70)

        X, y = build_training_set(cohort)
        model = LogisticRegressionModel(
            learning_rate=self.config.learning_rate,
            iterations=self.config.iterations
        )
        model.fit(X, y)

        train_accuracy = float((model.predict(X) == y).mean())
        logger.info(f"Training-set accuracy: {train_accuracy:.3f}")
        return model

    def audit(self, model: LogisticRegressionModel, cohort: List[PatientRecord]) -> AuditResult:
        logger.info("=" * 70)
        logger.info("STEP 3: FAIRNESS AUDIT")
        logger.info("=" * 70)
        return self.auditor.audit(model, cohort)

    def run(self) -> SimulationResult:
        """
        Run the complete pipeline.

        Returns:
            SimulationResult with cohort, summary, fitted model and audit
        """
        logger.info("\n" + "=" * 70)
        logger.info("MATERNITY READMISSION SIMULATION - FULL PIPELINE")
        logger.info("=" * 70 + "\n")

        cohort = self.generate()
        summary = summarize_cohort(cohort)
        model = self.train(cohort)
        audit = self.audit(model, cohort)

        logger.info("\n" + "=" * 70)
        logger.info("PIPELINE COMPLETED")
        logger.info("=" * 70)

        self.result = SimulationResult(
            config=self.config,
            cohort=cohort,
            summary=summary,
            model=model,
            audit=audit
        )
        return self.result

    def predict(self, profile: PatientProfile) -> RiskAssessment:
        """Score a what-if patient, running the pipeline first if needed."""
        if self.result is None:
            self.run()
        return assess_patient(self.result.model, profile)


def run_simulation(config: Optional[SimulationConfig] = None) -> SimulationResult:
    """Convenience function to run one simulation."""
    return ReadmissionPipeline(config).run()
