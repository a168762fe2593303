"""
Maternity Readmission Simulator - Main Entry Point

Command-line interface for the simulation pipeline.

Usage:
    maternity-readmission simulate --cohort-size 500 --seed 42
    maternity-readmission predict --age 38 --delivery-type Cesarean --labor-duration 14 \
        --complications --length-of-stay 6 --location Rural
"""

import argparse
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from maternity_readmission.config import SimulationConfig, load_config
from maternity_readmission.exceptions import ReadmissionSimulatorError
from maternity_readmission.fairness_audit import generate_audit_report
from maternity_readmission.pipeline import ReadmissionPipeline
from maternity_readmission.risk_assessment import PatientProfile

logger = logging.getLogger(__name__)


def _add_simulation_options(parser: argparse.ArgumentParser):
    parser.add_argument('--cohort-size', type=int, help='Number of synthetic patients')
    parser.add_argument('--seed', type=int, help='Random seed for a reproducible cohort')
    parser.add_argument('--learning-rate', type=float, help='Gradient descent step size')
    parser.add_argument('--iterations', type=int, help='Number of gradient descent iterations')
    parser.add_argument('--bias-threshold', type=float, help='Accuracy gap (points) that flags bias')
    parser.add_argument('--config', help='Path to config YAML file')
    parser.add_argument('--verbose', action='store_true', help='Enable debug logging')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='maternity-readmission',
        description="Maternity Readmission Risk Simulator and Fairness Audit",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    simulate_parser = subparsers.add_parser('simulate', help='Generate, train and audit')
    _add_simulation_options(simulate_parser)

    predict_parser = subparsers.add_parser('predict', help='Score a what-if patient')
    _add_simulation_options(predict_parser)
    predict_parser.add_argument('--age', type=int, required=True, help='Maternal age (18-45)')
    predict_parser.add_argument('--delivery-type', required=True, choices=['Vaginal', 'Cesarean'])
    predict_parser.add_argument('--labor-duration', type=float, required=True,
                                help='Labor duration in hours (1-24)')
    predict_parser.add_argument('--complications', action='store_true',
                                help='Complications during delivery')
    predict_parser.add_argument('--length-of-stay', type=int, required=True,
                                help='Length of stay in days (1-10)')
    predict_parser.add_argument('--location', required=True, choices=['Urban', 'Rural'])

    return parser


def resolve_config(args: argparse.Namespace) -> SimulationConfig:
    """Config file (if any) with command-line overrides applied."""
    config = load_config(args.config) if args.config else SimulationConfig()
    return config.with_overrides(
        cohort_size=args.cohort_size,
        seed=args.seed,
        learning_rate=args.learning_rate,
        iterations=args.iterations,
        bias_threshold=args.bias_threshold
    )


def print_summary(result) -> None:
    summary = result.summary
    print("=" * 70)
    print("COHORT SUMMARY")
    print("=" * 70)
    print(f"Patients: {summary.total}")
    print(f"Readmitted: {summary.readmitted_count} ({summary.readmission_rate:.1%})")
    print(f"Cesarean deliveries: {summary.cesarean_count}")
    print(f"Mean age: {summary.mean_age:.1f}")
    print("\nAge distribution:")
    for band, count in summary.age_distribution.items():
        print(f"  {band:<6} {count}")
    print("\nReadmission by delivery type:")
    for name, stats in summary.delivery_stats.items():
        print(f"  {name:<9} {stats['readmitted']}/{stats['total']} ({stats['rate']:.1%})")
    print()


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        config = resolve_config(args)
        pipeline = ReadmissionPipeline(config)

        if args.command == 'simulate':
            result = pipeline.run()
            print_summary(result)
            print(generate_audit_report(result.audit))

        elif args.command == 'predict':
            profile = PatientProfile(
                age=args.age,
                delivery_type=args.delivery_type,
                labor_duration_hours=args.labor_duration,
                has_complications=args.complications,
                length_of_stay_days=args.length_of_stay,
                location=args.location
            )
            assessment = pipeline.predict(profile)
            print(f"Readmission probability: {assessment.probability:.1%}")
            print(f"Risk level: {assessment.risk_level.value}")
            print(f"Recommendation: {assessment.recommendation}")

    except (ReadmissionSimulatorError, ValidationError, FileNotFoundError) as e:
        logger.error(f"{e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
