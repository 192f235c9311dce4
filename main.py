#!/usr/bin/env python3
"""
Regime bot CLI: backtest | live
Usage:
  python main.py backtest [--config config.yaml] [--csv candles.csv]
  python main.py live [--config config.yaml]
"""

from __future__ import annotations
import argparse
import logging
import time
from pathlib import Path

from regime_bot.backtesting.engine import BacktestEngine
from regime_bot.core.config import Config, load_config
from regime_bot.core.errors import DataSourceError
from regime_bot.core.logger import setup_logging
from regime_bot.engine import TradingEngine
from regime_bot.execution.base import CandleSource, SentimentSource
from regime_bot.execution.binance_spot import BinanceCandleSource
from regime_bot.execution.csv_source import CsvCandleSource
from regime_bot.execution.paper import MemoryConfigStore, MemoryLedger
from regime_bot.execution.sentiment import FixedSentimentSource, RandomSentimentSource
from regime_bot.execution.sinks import LoggingSink
from regime_bot.utils.telegram import TelegramNotifier
from regime_bot.utils.timeframes import timeframe_minutes

ROOT = Path.cwd()
logger = logging.getLogger("regime_bot")


def _sentiment_source(config: Config) -> SentimentSource:
    if config.sentiment_mode == "fixed":
        return FixedSentimentSource(config.sentiment_value)
    return RandomSentimentSource(config.sentiment_seed)


def run_backtest(config_path: Path | None, csv_path: Path | None) -> int:
    """Run the MA crossover backtest on CSV or Binance history and print metrics."""
    config = load_config(config_path, ROOT)
    setup_logging(config.log_level, config.log_dir, config.log_file)
    try:
        risk = config.risk
    except ValueError as e:
        logger.error("Invalid risk config: %s", e)
        return 1

    csv_path = csv_path or (Path(config.backtest_csv_path) if config.backtest_csv_path else None)
    source: CandleSource
    if csv_path:
        source = CsvCandleSource(csv_path)
    else:
        source = BinanceCandleSource(
            interval=config.backtest_interval,
            api_key=config.binance_api_key,
            api_secret=config.binance_api_secret,
        )
    try:
        candles = source.fetch(config.trading_pair, config.backtest_limit)
    except DataSourceError as e:
        logger.error("%s", e)
        return 1
    logger.info("Starting backtest for %s on %d candles", config.trading_pair, len(candles))

    engine = BacktestEngine(risk, initial_balance=config.backtest_initial_balance, pair=config.trading_pair)
    result = engine.run(candles)
    m = result.metrics
    print("\n--- Backtest Results ---")
    print(f"Ledger entries: {len(result.trades)}")
    print(f"Completed trades: {m.total_trades} (wins: {m.winning_trades}, losses: {m.losing_trades})")
    print(f"Total PnL: {m.total_pnl:.2f}")
    print(f"Average PnL: {m.avg_pnl:.2f} per trade")
    print(f"Win rate: {m.win_rate * 100:.1f}%")
    print(f"Max drawdown: {m.max_drawdown:.2f}")
    print(f"Sharpe ratio: {m.sharpe_ratio:.2f}")
    print(f"Max consecutive losses: {m.max_consecutive_losses}")
    if result.open_position is not None:
        print(f"Open position at end: {result.open_position.quantity:.6f} @ {result.open_position.entry_price:.2f}")
    return 0


def run_live(config_path: Path | None) -> int:
    """Paper-trade loop: one tick per poll until the circuit breaker disables the bot."""
    config = load_config(config_path, ROOT)
    setup_logging(config.log_level, config.log_dir, config.log_file)
    try:
        risk = config.risk
    except ValueError as e:
        logger.error("Invalid risk config: %s", e)
        return 1
    if not config.is_active:
        logger.warning("Bot is not active (set bot.is_active or BOT_ACTIVE=true)")
        return 1

    notifier = TelegramNotifier(config.telegram_bot_token, config.telegram_chat_id)
    engine = TradingEngine(
        pair=config.trading_pair,
        candle_source=BinanceCandleSource(
            interval=config.interval,
            api_key=config.binance_api_key,
            api_secret=config.binance_api_secret,
        ),
        sentiment_source=_sentiment_source(config),
        config_store=MemoryConfigStore(risk, is_active=True),
        ledger=MemoryLedger(Path(config.ledger_path) if config.ledger_path else None),
        sink=LoggingSink(notifier, pair=config.trading_pair),
        candle_limit=config.candle_limit,
        initial_balance=config.initial_balance,
    )
    poll_s = config.poll_seconds or timeframe_minutes(config.interval) * 60
    notifier.send(f"Regime bot starting | {config.trading_pair} | interval={config.interval}")
    while True:
        try:
            result = engine.tick()
            if not result.evaluated or result.disabled:
                logger.warning("Bot disabled: %s", result.message)
                break
            time.sleep(poll_s)
        except DataSourceError as e:
            logger.warning("Market data unavailable, retrying next poll: %s", e)
            time.sleep(poll_s)
        except KeyboardInterrupt:
            logger.info("Shutdown by user")
            notifier.send("Regime bot stopped (user request).")
            break
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Regime bot CLI")
    parser.add_argument("mode", choices=["backtest", "live"], help="Run backtest or live")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    parser.add_argument("--csv", type=Path, default=None, help="OHLCV CSV for backtest")
    args = parser.parse_args()
    if args.mode == "backtest":
        return run_backtest(args.config, args.csv)
    return run_live(args.config)


if __name__ == "__main__":
    raise SystemExit(main())
