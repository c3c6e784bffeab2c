"""Click CLI commands for stockdash."""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import Any

import click

from stockdash.config import AppConfig
from stockdash.engine.indicators import (
    BandIndicator,
    IndicatorKind,
    IndicatorResult,
    LineIndicator,
    MacdIndicator,
    StochasticIndicator,
    compute_indicator,
)
from stockdash.errors import StockDashError
from stockdash.utils.logging import bind_request_id, setup_logging


@click.group()
@click.option("--log-level", default=None, help="Override the configured log level.")
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    """stockdash: technical indicators and position sizing."""
    try:
        config = AppConfig(log_level=log_level) if log_level else AppConfig()
    except ValueError as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e
    setup_logging(level=config.log_level, log_format=config.log_format)
    bind_request_id()
    ctx.obj = config


def _echo_json(payload: Any) -> None:
    click.echo(json.dumps(payload, indent=2))


def _points_json(points: tuple[Any, ...]) -> list[dict[str, Any]]:
    return [asdict(p) for p in points]


def indicator_to_json(result: IndicatorResult) -> dict[str, Any]:
    """Serialize a tagged indicator result for chart consumption."""
    if isinstance(result, LineIndicator):
        return {
            "kind": result.kind.value,
            "period": result.period,
            "points": _points_json(result.points),
        }
    if isinstance(result, BandIndicator):
        return {
            "kind": result.kind.value,
            "period": result.period,
            "multiplier": result.multiplier,
            "upper": _points_json(result.bands.upper),
            "middle": _points_json(result.bands.middle),
            "lower": _points_json(result.bands.lower),
        }
    if isinstance(result, MacdIndicator):
        return {
            "kind": result.kind.value,
            "fastPeriod": result.fast_period,
            "slowPeriod": result.slow_period,
            "signalPeriod": result.signal_period,
            "macd": _points_json(result.macd),
            "signal": _points_json(result.signal),
            "histogram": _points_json(result.histogram),
        }
    if isinstance(result, StochasticIndicator):
        return {
            "kind": result.kind.value,
            "kPeriod": result.k_period,
            "kSmoothing": result.k_smoothing,
            "dPeriod": result.d_period,
            "k": _points_json(result.k),
            "d": _points_json(result.d),
        }
    raise TypeError(f"Unsupported indicator result: {type(result).__name__}")


@cli.command()
@click.argument("csv_path", type=click.Path(dir_okay=False))
@click.option(
    "--kind",
    type=click.Choice([k.value for k in IndicatorKind]),
    default=IndicatorKind.SMA.value,
    show_default=True,
    help="Indicator to compute.",
)
@click.option("--period", type=int, default=None, help="Lookback period.")
@click.option("--multiplier", type=float, default=None, help="Bollinger multiplier.")
@click.option("--symbol", default="", help="Symbol if the CSV has no symbol column.")
@click.pass_obj
def indicators(
    config: AppConfig,
    csv_path: str,
    kind: str,
    period: int | None,
    multiplier: float | None,
    symbol: str,
) -> None:
    """Compute an indicator over the bars in CSV_PATH and print JSON."""
    from stockdash.market.csv_loader import load_bars

    ind = config.indicators
    params: dict[str, Any]
    indicator_kind = IndicatorKind(kind)
    if indicator_kind is IndicatorKind.MACD:
        params = {
            "fast_period": ind.macd_fast,
            "slow_period": ind.macd_slow,
            "signal_period": ind.macd_signal,
        }
    elif indicator_kind is IndicatorKind.STOCHASTIC:
        params = {
            "k_period": period if period is not None else ind.stochastic_k,
            "k_smoothing": ind.stochastic_smoothing,
            "d_period": ind.stochastic_d,
        }
    elif indicator_kind is IndicatorKind.OBV:
        params = {}
    elif indicator_kind is IndicatorKind.BOLLINGER:
        params = {
            "period": period if period is not None else ind.bollinger_period,
            "multiplier": (
                multiplier if multiplier is not None else ind.bollinger_multiplier
            ),
        }
    else:
        defaults = {
            IndicatorKind.RSI: ind.rsi_period,
            IndicatorKind.ATR: ind.atr_period,
        }
        if period is None:
            period = defaults.get(indicator_kind, ind.sma_fast)
        params = {"period": period}

    try:
        bars = load_bars(csv_path, symbol=symbol)
        result = compute_indicator(indicator_kind, bars, **params)
    except StockDashError as e:
        raise click.ClickException(str(e)) from e

    _echo_json(indicator_to_json(result))


@cli.command()
@click.argument("csv_path", type=click.Path(dir_okay=False))
@click.option("--symbol", default="", help="Symbol if the CSV has no symbol column.")
@click.pass_obj
def signals(config: AppConfig, csv_path: str, symbol: str) -> None:
    """Interpret the latest indicator readings for the bars in CSV_PATH."""
    from stockdash.engine.signals import technical_summary
    from stockdash.market.csv_loader import load_bars

    try:
        bars = load_bars(csv_path, symbol=symbol)
        summary = technical_summary(bars, config.indicators)
    except StockDashError as e:
        raise click.ClickException(str(e)) from e

    _echo_json(
        {
            "composite": {
                "signal": summary.composite_signal,
                "confidence": summary.confidence,
            },
            "indicators": {
                s.name: {
                    "value": s.value,
                    "signal": s.signal,
                    "interpretation": s.interpretation,
                }
                for s in summary.signals
            },
            "warnings": list(summary.warnings),
        }
    )


@cli.command()
@click.option("--capital", required=True, type=str, help="Account capital.")
@click.option(
    "--risk",
    default=None,
    type=str,
    help="Risk per trade as a fraction (default from config, 0.02).",
)
@click.option("--entry", required=True, type=str, help="Entry price.")
@click.option("--stop", required=True, type=str, help="Stop-loss price.")
@click.option(
    "--cash", default=None, type=str, help="Available cash (default: capital)."
)
@click.option("--target", default=None, type=str, help="Optional target price.")
@click.option("--symbol", default="", help="Ticker symbol, for logging.")
@click.option(
    "--bars",
    "bars_path",
    default=None,
    type=click.Path(dir_okay=False),
    help="CSV of bars; adds technical signals to the assessment.",
)
@click.option(
    "--assess", is_flag=True, help="Print the full risk assessment."
)
@click.pass_obj
def size(
    config: AppConfig,
    capital: str,
    risk: str | None,
    entry: str,
    stop: str,
    cash: str | None,
    target: str | None,
    symbol: str,
    bars_path: str | None,
    assess: bool,
) -> None:
    """Size a position from a trade setup and print JSON."""
    from stockdash.risk.assessment import assess_risk
    from stockdash.risk.position_sizer import PositionSizingRequest, compute_sizing
    from stockdash.risk.schemas import RiskAssessmentResponse, SizingResponse

    try:
        request = PositionSizingRequest.from_values(
            capital=capital,
            risk_per_trade=risk or config.risk.default_risk_per_trade,
            entry_price=entry,
            stop_loss=stop,
            available_cash=cash if cash is not None else capital,
            target_price=target,
            symbol=symbol,
        )
        if assess or bars_path:
            summary = None
            if bars_path:
                from stockdash.engine.signals import technical_summary
                from stockdash.market.csv_loader import load_bars

                summary = technical_summary(
                    load_bars(bars_path, symbol=symbol), config.indicators
                )
            assessment = assess_risk(request, summary, config)
            payload = RiskAssessmentResponse.from_assessment(assessment).to_json_dict()
        else:
            result = compute_sizing(request, config.risk, config.scenario)
            payload = SizingResponse.from_result(result).to_json_dict()
    except StockDashError as e:
        raise click.ClickException(str(e)) from e

    _echo_json(payload)


@cli.command(name="config")
@click.pass_obj
def show_config(cfg: AppConfig) -> None:
    """Show current configuration."""
    click.echo("=== stockdash Configuration ===\n")

    click.echo(f"Log Level:    {cfg.log_level}")
    click.echo(f"Log Format:   {cfg.log_format}")
    click.echo("")

    click.echo("[Risk]")
    click.echo(f"  Default Risk/Trade:     {cfg.risk.default_risk_per_trade}")
    click.echo(f"  Concentration Limit %:  {cfg.risk.concentration_threshold_pct}")
    click.echo(f"  Risk Tolerance %:       {cfg.risk.risk_tolerance_pct}")
    click.echo("")

    click.echo("[Scenario]")
    click.echo(f"  Best Case Multiple:     {cfg.scenario.best_case_multiple}")
    click.echo(f"  Expected Case Multiple: {cfg.scenario.expected_case_multiple}")
    click.echo(f"  Win Probability:        {cfg.scenario.win_probability}")
    click.echo("")

    ind = cfg.indicators
    click.echo("[Indicators]")
    click.echo(f"  SMA:        {ind.sma_fast}/{ind.sma_mid}/{ind.sma_slow}")
    click.echo(
        f"  Bollinger:  {ind.bollinger_period} x {ind.bollinger_multiplier}"
    )
    click.echo(f"  RSI/ATR:    {ind.rsi_period}/{ind.atr_period}")
    click.echo(f"  MACD:       {ind.macd_fast}/{ind.macd_slow}/{ind.macd_signal}")
    stoch = f"{ind.stochastic_k}/{ind.stochastic_smoothing}/{ind.stochastic_d}"
    click.echo(f"  Stochastic: {stoch}")
    click.echo(f"  Volume/OBV: {ind.volume_period}/{ind.obv_lookback}")
    click.echo(f"  Range:      {ind.range_period}")
