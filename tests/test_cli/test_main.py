"""Tests for the command line interface."""
import json
import re

from typer.testing import CliRunner

from main import app

runner = CliRunner()

CONFIG_YAML = """
service: my svc
provider:
  region: westus
  runtime: nodejs12
"""


def test_generate_command(tmp_path):
    """Test generating files and refusing to overwrite them."""
    config_path = tmp_path / "serverless.yml"
    config_path.write_text(CONFIG_YAML)
    out = tmp_path / "out"

    result = runner.invoke(app, ["generate", "--config", str(config_path), "--output-dir", str(out)])
    assert result.exit_code == 0, result.output
    template = json.loads((out / "azuredeploy.json").read_text())
    assert len(template["resources"]) == 3

    result = runner.invoke(app, ["generate", "--config", str(config_path), "--output-dir", str(out)])
    assert result.exit_code == 1

    result = runner.invoke(app, ["generate", "-c", str(config_path), "-o", str(out), "--force", "--stage", "prod"])
    assert result.exit_code == 0, result.output
    params = json.loads((out / "azuredeploy.parameters.json").read_text())
    assert params["parameters"]["functionAppName"]["value"] == "sls-wus-p-my-svc"


def test_generate_reports_config_errors(tmp_path):
    """Test that a generation error exits with status 1."""
    config_path = tmp_path / "serverless.yml"
    config_path.write_text("service: svc\nprovider:\n  region: westus\n")

    result = runner.invoke(app, ["generate", "--config", str(config_path)])
    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "provider.functionRuntime" in result.output
    assert not (tmp_path / "azuredeploy.json").exists()


def test_names_command(tmp_path):
    """Test the derived names table."""
    config_path = tmp_path / "serverless.yml"
    config_path.write_text(CONFIG_YAML)

    result = runner.invoke(app, ["names", "--config", str(config_path), "--region", "eastus"])
    assert result.exit_code == 0, result.output
    assert "functionApp" in result.output
    assert "sls-eus-d-my-svc" in result.output


def test_missing_config_file(tmp_path):
    """Test a nonexistent configuration file."""
    result = runner.invoke(app, ["names", "--config", str(tmp_path / "missing.yml")])
    assert result.exit_code == 1


def test_generate_debug_prints_resolved_parameters(tmp_path):
    """Test the debug parameter dump, with no key material in it."""
    config_path = tmp_path / "serverless.yml"
    config_path.write_text(CONFIG_YAML)

    result = runner.invoke(app, ["generate", "-c", str(config_path), "-o", str(tmp_path / "out"), "--debug"])
    assert result.exit_code == 0, result.output
    for kind in ("storageAccount", "appInsights", "functionApp"):
        assert f"Debug: Resolved parameters for {kind}" in result.output
    assert '"sls-wus-d-my-svc"' in result.output
    assert not re.search(r"AccountKey=[A-Za-z0-9+/]{20,}", result.output)


def test_non_mapping_config_reports_error(tmp_path):
    """Test that a list document is reported, not raised."""
    config_path = tmp_path / "serverless.yml"
    config_path.write_text("- service: svc\n")

    result = runner.invoke(app, ["names", "--config", str(config_path)])
    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "mapping" in result.output
