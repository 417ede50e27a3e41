import json

from typer.testing import CliRunner

from fixtures.scenarios import primary_only
from smithy_cli import app

runner = CliRunner()


def test_rates_prints_table():
    result = runner.invoke(app, ["rates", "--income", "85000", "--province", "ON"])

    assert result.exit_code == 0, result.output
    assert "marginal_rate" in result.stdout
    assert "0.2965" in result.stdout


def test_rates_writes_csv(tmp_path):
    out = tmp_path / "rates.csv"
    result = runner.invoke(
        app, ["rates", "--income", "85000", "--income", "120000", "--province", "ON", "--out", str(out)]
    )

    assert result.exit_code == 0, result.output
    lines = out.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "province,net_taxable_income,marginal_rate"
    assert len(lines) == 3


def test_calculate_prints_camel_case_result(tmp_path):
    path = tmp_path / "input.json"
    path.write_text(json.dumps(primary_only()), encoding="utf-8")

    result = runner.invoke(app, ["calculate", str(path)])

    assert result.exit_code == 0, result.output
    assert '"equityGained"' in result.stdout
    assert '"householdTaxBenefit"' in result.stdout


def test_calculate_rejects_bad_input(tmp_path):
    payload = primary_only()
    payload["primaryProperty"]["currentAmountOwing"] = 600_000
    path = tmp_path / "input.json"
    path.write_text(json.dumps(payload), encoding="utf-8")

    result = runner.invoke(app, ["calculate", str(path)])

    assert result.exit_code == 1
