"""Unit tests for the simulation pipeline and CLI."""

import json

import pytest

from maternity_readmission.config import SimulationConfig
from maternity_readmission.main import main
from maternity_readmission.pipeline import ReadmissionPipeline, run_simulation
from maternity_readmission.risk_assessment import PatientProfile


@pytest.fixture
def small_config():
    return SimulationConfig(cohort_size=200, seed=1, iterations=200)


class TestReadmissionPipeline:
    """Test suite for ReadmissionPipeline."""

    def test_run_produces_all_artifacts(self, small_config):
        result = ReadmissionPipeline(small_config).run()

        assert len(result.cohort) == 200
        assert result.summary.total == 200
        assert result.model.is_fitted
        assert result.audit.n_samples == 200
        assert len(result.audit.disparities) == 2

    def test_seeded_runs_are_reproducible(self, small_config):
        first = run_simulation(small_config)
        second = run_simulation(small_config)

        assert first.cohort == second.cohort
        assert first.model.weights.tolist() == second.model.weights.tolist()
        assert first.audit.overall_accuracy == second.audit.overall_accuracy

    def test_threshold_from_config(self):
        config = SimulationConfig(cohort_size=100, seed=2, iterations=50, bias_threshold=100.0)

        result = run_simulation(config)

        assert not result.audit.bias_detected
        assert all(d.threshold == 100.0 for d in result.audit.disparities)

    def test_predict_runs_pipeline_on_demand(self, small_config):
        pipeline = ReadmissionPipeline(small_config)

        assessment = pipeline.predict(PatientProfile())

        assert pipeline.result is not None
        assert 0.0 < assessment.probability < 1.0

    def test_to_dict_is_json_serializable(self, small_config):
        result = run_simulation(small_config)

        payload = json.loads(json.dumps(result.to_dict()))

        assert payload['config']['cohort_size'] == 200
        assert len(payload['model']['weights']) == 6


class TestCLI:
    """Test suite for the command-line entry point."""

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "simulate" in capsys.readouterr().out

    def test_simulate(self, capsys):
        exit_code = main(['simulate', '--cohort-size', '120', '--seed', '3', '--iterations', '100'])

        output = capsys.readouterr().out
        assert exit_code == 0
        assert "COHORT SUMMARY" in output
        assert "Patients: 120" in output
        assert "FAIRNESS AUDIT REPORT" in output

    def test_simulate_with_config_file(self, tmp_path, capsys):
        path = tmp_path / "run.yaml"
        path.write_text("cohort_size: 80\nseed: 4\niterations: 50\n")

        exit_code = main(['simulate', '--config', str(path)])

        assert exit_code == 0
        assert "Patients: 80" in capsys.readouterr().out

    def test_predict(self, capsys):
        exit_code = main([
            'predict', '--cohort-size', '150', '--seed', '5', '--iterations', '100',
            '--age', '38', '--delivery-type', 'Cesarean', '--labor-duration', '14',
            '--complications', '--length-of-stay', '6', '--location', 'Rural'
        ])

        output = capsys.readouterr().out
        assert exit_code == 0
        assert "Readmission probability:" in output
        assert "Risk level:" in output

    def test_predict_out_of_range_input_fails(self, capsys):
        exit_code = main([
            'predict', '--cohort-size', '50', '--seed', '5', '--iterations', '10',
            '--age', '60', '--delivery-type', 'Vaginal', '--labor-duration', '10',
            '--length-of-stay', '3', '--location', 'Urban'
        ])

        assert exit_code == 1
        assert "Error" in capsys.readouterr().err

    def test_invalid_cohort_size_fails(self):
        assert main(['simulate', '--cohort-size', '0']) == 1

    def test_negative_seed_fails(self, capsys):
        exit_code = main(['simulate', '--cohort-size', '50', '--iterations', '5', '--seed', '-1'])

        assert exit_code == 1
        assert "seed" in capsys.readouterr().err

    def test_wrongly_typed_config_value_fails(self, tmp_path, capsys):
        path = tmp_path / "run.yaml"
        path.write_text("cohort_size: \"500\"\n")

        exit_code = main(['simulate', '--config', str(path)])

        assert exit_code == 1
        assert "cohort_size" in capsys.readouterr().err

    def test_missing_config_file_fails(self, tmp_path):
        assert main(['simulate', '--config', str(tmp_path / "nope.yaml")]) == 1

    def test_invalid_choice_exits_with_usage_error(self):
        with pytest.raises(SystemExit) as exc_info:
            main(['predict', '--age', '30', '--delivery-type', 'Forceps', '--labor-duration', '5',
                  '--length-of-stay', '3', '--location', 'Urban'])

        assert exc_info.value.code == 2
