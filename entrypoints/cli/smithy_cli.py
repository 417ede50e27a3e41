from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

import typer

from smithy.analysis.batch import marginal_rate_table
from smithy.domain.errors import CalculationError
from smithy.services.payoff import format_time_granular
from smithy.services.scenario import calculate_smith_manoeuvre

app = typer.Typer(help="Smith Manoeuvre calculator (tax rates, one-year projection).")


@app.command("calculate")
def calculate_cmd(
    input_path: Path = typer.Argument(..., exists=True, readable=True, help="Calculator input JSON"),
    pretty: bool = typer.Option(True, help="Indent the JSON output"),
) -> None:
    """
    Run one scenario from a JSON file (camelCase form payload) and print the result.
    """
    payload = json.loads(input_path.read_text(encoding="utf-8"))
    try:
        result = calculate_smith_manoeuvre(payload)
    except CalculationError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1) from e

    typer.echo(result.model_dump_json(by_alias=True, indent=2 if pretty else None))
    typer.echo(
        f"Regular payoff: {format_time_granular(result.regular_payoff_months)} | "
        f"With Smith Manoeuvre: {format_time_granular(result.accelerated_payoff_months)} | "
        f"Saved: {format_time_granular(result.payoff_months_saved)}",
        err=True,
    )


@app.command("rates")
def rates_cmd(
    income: List[float] = typer.Option(..., "--income", help="Net taxable income(s)"),
    province: Optional[List[str]] = typer.Option(None, "--province", help="Province code(s); all when omitted"),
    out: Optional[Path] = typer.Option(None, help="Write CSV here instead of printing"),
) -> None:
    """
    Marginal rate table across provinces and incomes.
    """
    df = marginal_rate_table(income, province or None)
    if out is not None:
        df.to_csv(out, index=False)
        typer.echo(f"wrote {len(df)} rows -> {out}")
        return
    typer.echo(df.to_string(index=False))


if __name__ == "__main__":
    app()
