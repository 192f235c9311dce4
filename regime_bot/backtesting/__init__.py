"""Backtesting engine: bar-by-bar replay of a policy over historical candles."""

from regime_bot.backtesting.engine import BacktestEngine, BacktestResult, portfolio_curve, run_backtest

__all__ = ["BacktestEngine", "BacktestResult", "portfolio_curve", "run_backtest"]
