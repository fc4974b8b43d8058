"""Tests for the instance-matcher CLI."""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from instance_matcher.cli import main
from instance_matcher.sample_data import SAMPLE_INSTANCE_TYPES


@pytest.fixture(autouse=True)
def no_user_config(tmp_path, monkeypatch):
    """Keep config discovery away from the developer's own files."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("INSTANCE_MATCHER_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)


def invoke(*args):
    return CliRunner().invoke(main, list(args))


class TestMatchCommand:
    """Tests for the match command."""

    def test_help(self):
        result = invoke("match", "--help")

        assert result.exit_code == 0
        assert "--min-vcpus" in result.output
        assert "--weight-cost" in result.output

    def test_json_output(self):
        result = invoke("match", "--min-vcpus", "2", "--min-memory", "8", "-j")

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert [m["instance"]["InstanceType"] for m in data][:3] == [
            "m6g.xlarge", "m5.large", "c5.xlarge",
        ]
        assert data[0]["match_score"] == 89
        assert data[0]["pricing"]["spot_average_24h"] == data[0]["pricing"]["spot_current"]

    def test_max_results_and_no_spot(self):
        result = invoke("match", "--min-vcpus", "2", "--min-memory", "8", "-m", "2", "--no-spot", "-j")

        data = json.loads(result.stdout)
        assert [(m["instance"]["InstanceType"], m["match_score"]) for m in data] == [
            ("m6g.xlarge", 85),
            ("m5.large", 81),
        ]

    def test_weight_override(self):
        result = invoke(
            "match", "--min-vcpus", "2", "--min-memory", "8",
            "--weight-performance", "0", "--weight-cost", "0", "--weight-efficiency", "1",
            "-j",
        )

        data = json.loads(result.stdout)
        assert data[0]["instance"]["InstanceType"] == "m5.large"
        assert data[0]["breakdown"]["weights"] == {"performance": 0.0, "cost": 0.0, "efficiency": 1.0}

    def test_table_output(self):
        result = invoke("match", "--arch", "arm64")

        assert result.exit_code == 0
        assert "m6g.xlarge" in result.output
        assert "Why:" in result.output

    def test_no_matches(self):
        result = invoke("match", "--min-vcpus", "1000")

        assert result.exit_code == 0
        assert "No instance types meet these requirements" in result.output

    def test_writes_out_file(self, tmp_path):
        out = tmp_path / "matches.json"

        result = invoke("match", "--gpu", "--out", str(out))

        assert result.exit_code == 0
        assert json.loads(out.read_text())[0]["instance"]["InstanceType"] == "p3.2xlarge"

    def test_custom_catalog_and_pricing(self, tmp_path):
        catalog = tmp_path / "catalog.json"
        catalog.write_text(json.dumps({"InstanceTypes": SAMPLE_INSTANCE_TYPES[:1]}))
        rates = tmp_path / "rates.json"
        rates.write_text(json.dumps({"m5.large": {"on_demand": 0.1}}))

        result = invoke("-c", str(catalog), "-p", str(rates), "match", "-j")

        data = json.loads(result.stdout)
        assert len(data) == 1
        assert data[0]["pricing"]["on_demand"] == 0.1
        assert data[0]["pricing"]["spot_current"] == 0.0

    def test_bad_catalog_exits_with_error(self, tmp_path):
        catalog = tmp_path / "catalog.json"
        catalog.write_text("{}")

        result = invoke("-c", str(catalog), "match")

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_config_file_defaults(self, tmp_path):
        config = tmp_path / "custom.yaml"
        config.write_text("max_results: 1\ninclude_spot_pricing: false\n")

        result = invoke("--config", str(config), "match", "--min-vcpus", "2", "--min-memory", "8", "-j")

        data = json.loads(result.stdout)
        assert len(data) == 1
        assert data[0]["match_score"] == 85

    @patch("instance_matcher.aws.AWSService")
    def test_aws_flag_uses_live_service(self, mock_service_cls):
        mock_service_cls.return_value.get_instance_types_by_requirements.side_effect = RuntimeError(
            "no credentials"
        )

        result = invoke("--aws", "match", "--min-vcpus", "2")

        assert result.exit_code == 1
        assert "no credentials" in result.output
        mock_service_cls.assert_called_once()


class TestWorkloadCommands:
    """Tests for the workload and workloads commands."""

    def test_workloads_lists_presets(self):
        result = invoke("workloads")

        assert result.exit_code == 0
        assert "llm-training" in result.output
        assert "genomics-alignment" in result.output

    def test_workload_json(self):
        result = invoke("workload", "llm-training", "-j")

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [m["instance"]["InstanceType"] for m in data] == ["p3.2xlarge"]

    def test_unknown_workload(self):
        result = invoke("workload", "quantum-annealing")

        assert result.exit_code == 1
        assert "Unknown workload: quantum-annealing" in result.output
        assert "llm-training" in result.output


class TestBestAndCompare:
    """Tests for the best and compare commands."""

    def test_best(self):
        result = invoke("best", "--min-vcpus", "2", "--min-memory", "8", "-j")

        data = json.loads(result.stdout)
        assert data["instance"]["InstanceType"] == "m6g.xlarge"
        assert data["match_score"] == 89

    def test_best_none_json(self):
        result = invoke("best", "--min-vcpus", "1000", "-j")

        assert result.exit_code == 0
        assert json.loads(result.stdout) is None

    def test_best_json_with_out_file(self, tmp_path):
        out = tmp_path / "best.json"

        result = invoke("best", "--min-vcpus", "2", "--min-memory", "8", "-j", "--out", str(out))

        assert json.loads(result.stdout) == json.loads(out.read_text())
        assert json.loads(out.read_text())["instance"]["InstanceType"] == "m6g.xlarge"

    def test_best_none_writes_null_to_out_file(self, tmp_path):
        out = tmp_path / "best.json"

        result = invoke("best", "--min-vcpus", "1000", "--out", str(out))

        assert result.exit_code == 0
        assert "No instance type meets these requirements" in result.output
        assert json.loads(out.read_text()) is None

    def test_best_none_text(self):
        result = invoke("best", "--min-vcpus", "1000")

        assert "No instance type meets these requirements" in result.output

    def test_compare_catalog_order(self):
        result = invoke("compare", "c5.xlarge", "m5.large", "--min-vcpus", "2", "-j")

        data = json.loads(result.stdout)
        assert [m["instance"]["InstanceType"] for m in data] == ["m5.large", "c5.xlarge"]

    def test_compare_requires_names(self):
        result = invoke("compare")

        assert result.exit_code != 0

    def test_compare_unknown(self):
        result = invoke("compare", "zz.nothing")

        assert result.exit_code == 0
        assert "None of zz.nothing found in catalog" in result.output


class TestInitConfig:
    """Tests for the init-config command."""

    def test_creates_file(self, tmp_path):
        out = tmp_path / "generated.yaml"

        result = invoke("init-config", "--out", str(out))

        assert result.exit_code == 0
        assert out.exists()
        assert "weight_factors" in out.read_text()

    def test_refuses_overwrite(self, tmp_path):
        out = tmp_path / "generated.yaml"
        out.write_text("max_results: 3\n")

        result = invoke("init-config", "--out", str(out))

        assert result.exit_code == 1
        assert "already exists" in result.output
        assert out.read_text() == "max_results: 3\n"

    def test_force_overwrite(self, tmp_path):
        out = tmp_path / "generated.yaml"
        out.write_text("max_results: 3\n")

        result = invoke("init-config", "--out", str(out), "--force")

        assert result.exit_code == 0
        assert "max_results: 10" in out.read_text()
