import json
import logging
import sys

import click

from quantrisk.config import Settings
from quantrisk.logging_config import setup_logging

logger = logging.getLogger(__name__)


def _parse_scenario(value: str):
    """Parse NAME:VOL_SHOCK:DRIFT_SHOCK into a StressScenario."""
    from quantrisk.analysis.types import StressScenario

    try:
        name, vol_shock, drift_shock = value.rsplit(":", 2)
        return StressScenario(name=name, volatility_shock=float(vol_shock), drift_shock=float(drift_shock))
    except ValueError:
        raise click.BadParameter(f"expected NAME:VOL_SHOCK:DRIFT_SHOCK, got {value!r}")


def _emit(data: dict, as_json: bool):
    if as_json:
        click.echo(json.dumps(data, indent=2, default=str))
        return
    for key, value in data.items():
        if isinstance(value, dict):
            click.echo(f"{key}:")
            for sub_key, sub_value in value.items():
                click.echo(f"  {sub_key}: {_fmt(sub_value)}")
        else:
            click.echo(f"{key}: {_fmt(value)}")


def _fmt(value) -> str:
    return f"{value:.6f}" if isinstance(value, float) else str(value)


def _fail(error: Exception):
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool):
    """quantrisk - GARCH / Monte Carlo risk analytics"""
    settings = Settings()
    setup_logging(settings.log_dir)
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    ctx.obj = settings


@cli.command()
@click.argument("csv_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--alpha", type=float, default=None, help="GARCH shock weight")
@click.option("--beta", type=float, default=None, help="GARCH persistence")
@click.option("--theta", type=float, default=None, help="Mean-reversion strength toward trend")
@click.option("--switch-prob", type=float, default=None, help="Regime flip probability per step")
@click.option("--paths", "num_paths", type=int, default=None, help="Number of simulated paths")
@click.option("--steps", "num_steps", type=int, default=None, help="Trading days to simulate")
@click.option("--fit", is_flag=True, help="Estimate alpha/beta from history by maximum likelihood")
@click.option("--seed", type=int, default=None, help="Random seed for reproducible output")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of text")
@click.pass_obj
def simulate(settings: Settings, csv_path: str, alpha: float | None, beta: float | None,
             theta: float | None, switch_prob: float | None, num_paths: int | None,
             num_steps: int | None, fit: bool, seed: int | None, as_json: bool):
    """Simulate forward price paths and report risk statistics."""
    from quantrisk.analysis import AnalyticsError, calculate_returns, fit_garch_params, run_analysis
    from quantrisk.collectors.prices import load_price_csv

    try:
        prices = load_price_csv(csv_path)
        if fit:
            fitted = fit_garch_params(calculate_returns(prices))
            if fitted is None:
                click.echo("GARCH fit failed, using configured alpha/beta", err=True)
            else:
                alpha, beta = fitted.alpha, fitted.beta
        params = settings.simulation_params(
            alpha=alpha, beta=beta, theta=theta, switch_prob=switch_prob,
            num_paths=num_paths, num_steps=num_steps,
        )
        result = run_analysis(
            prices,
            params,
            seed if seed is not None else settings.simulation_seed,
            max_workers=settings.simulation_max_workers,
            block_size=settings.simulation_block_size,
        )
    except AnalyticsError as e:
        _fail(e)

    data = result.to_dict(include_paths=False)
    if not as_json:
        data.pop("histogram")
    _emit(data, as_json)


@cli.command()
@click.argument("csv_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--scenario", "-s", "scenario_specs", multiple=True,
              help="Scenario as NAME:VOL_SHOCK:DRIFT_SHOCK (default: built-in set)")
@click.option("--paths", "num_paths", type=int, default=None, help="Number of simulated paths")
@click.option("--steps", "num_steps", type=int, default=None, help="Trading days to simulate")
@click.option("--seed", type=int, default=None, help="Random seed for reproducible output")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of text")
@click.pass_obj
def stress(settings: Settings, csv_path: str, scenario_specs: tuple[str, ...],
           num_paths: int | None, num_steps: int | None, seed: int | None, as_json: bool):
    """Run stress scenarios against the simulated distribution."""
    from quantrisk.analysis import (
        AnalyticsError,
        calculate_garch_volatility,
        calculate_returns,
        calculate_trend_and_drift,
        run_stress_test,
    )
    from quantrisk.collectors.prices import load_price_csv

    scenarios = [_parse_scenario(spec) for spec in scenario_specs] or None

    try:
        prices = load_price_csv(csv_path)
        params = settings.simulation_params(num_paths=num_paths, num_steps=num_steps)
        returns = calculate_returns(prices)
        volatility = float(calculate_garch_volatility(returns, params.alpha, params.beta)[-1])
        drift = calculate_trend_and_drift(prices, params.theta).drift
        results = run_stress_test(
            prices[-1].close,
            params,
            volatility,
            drift,
            scenarios,
            seed if seed is not None else settings.simulation_seed,
            max_workers=settings.simulation_max_workers,
            block_size=settings.simulation_block_size,
        )
    except AnalyticsError as e:
        _fail(e)

    if as_json:
        click.echo(json.dumps([r.to_dict() for r in results], indent=2))
        return

    click.echo(f"{'Scenario':<20} {'VaR95':>10} {'VaR99':>10} {'ES95':>10} {'ES99':>10} {'P(loss)':>8} {'MaxDD':>8}")
    for r in results:
        click.echo(
            f"{r.scenario.name:<20} {r.var95:>10.4f} {r.var99:>10.4f} "
            f"{r.expected_shortfall95:>10.4f} {r.expected_shortfall99:>10.4f} "
            f"{r.probability_of_loss:>8.3f} {r.max_drawdown:>8.3f}"
        )


@cli.command()
@click.argument("csv_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--benchmark", "-b", "benchmark_path", type=click.Path(exists=True, dir_okay=False),
              default=None, help="Benchmark price CSV aligned with CSV_PATH")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of text")
@click.pass_obj
def performance(settings: Settings, csv_path: str, benchmark_path: str | None, as_json: bool):
    """Compute Sharpe, Sortino, Calmar and benchmark-relative ratios."""
    from quantrisk.analysis import AnalyticsError, calculate_performance_metrics
    from quantrisk.collectors.prices import load_benchmark_returns, load_price_csv

    try:
        prices = load_price_csv(csv_path)
        benchmark = load_benchmark_returns(benchmark_path) if benchmark_path else None
        metrics = calculate_performance_metrics(prices, benchmark, settings.risk_free_rate)
    except AnalyticsError as e:
        _fail(e)

    _emit(metrics.to_dict(), as_json)


@cli.command()
@click.argument("csv_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--switch-prob", type=float, default=None, help="Regime flip probability per step")
@click.option("--seed", type=int, default=None, help="Random seed for reproducible output")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of text")
@click.pass_obj
def regime(settings: Settings, csv_path: str, switch_prob: float | None, seed: int | None,
           as_json: bool):
    """Label bull/bear regimes and summarise each."""
    from quantrisk.analysis import (
        AnalyticsError,
        analyze_regime,
        calculate_returns,
        generate_markov_regime,
    )
    from quantrisk.collectors.prices import load_price_csv

    if switch_prob is None:
        switch_prob = settings.simulation_switch_prob

    try:
        returns = calculate_returns(load_price_csv(csv_path))
        regimes = generate_markov_regime(
            returns, switch_prob, seed if seed is not None else settings.simulation_seed,
        )
        analysis = analyze_regime(returns, regimes)
    except AnalyticsError as e:
        _fail(e)

    _emit(analysis.to_dict(), as_json)


@cli.command()
@click.option("--seed", type=int, default=None, help="Random seed for reproducible output")
def selfcheck(seed: int | None):
    """Run the engine end to end on a synthetic walk."""
    from quantrisk.analysis.synthetic import run_self_check

    success, errors = run_self_check(seed)
    if success:
        click.echo("Self-check passed.")
        return
    for error in errors:
        click.echo(f"  FAILED: {error}", err=True)
    sys.exit(1)


@cli.command()
@click.option("--host", default=None, help="Bind address (default: settings)")
@click.option("--port", type=int, default=None, help="Bind port (default: settings)")
@click.pass_obj
def serve(settings: Settings, host: str | None, port: int | None):
    """Start the HTTP API."""
    import uvicorn

    from quantrisk.web.app import create_app

    app = create_app(settings)
    uvicorn.run(app, host=host or settings.api_host, port=port or settings.api_port)


if __name__ == "__main__":
    cli()
