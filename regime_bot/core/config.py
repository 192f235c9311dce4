"""
Load configuration from config.yaml and .env. API keys and bot tokens only from env.
"""

from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv


@dataclass(frozen=True)
class RiskConfig:
    """Per-evaluation strategy and risk parameters."""
    short_ma_period: int = 10
    long_ma_period: int = 50
    trade_amount: float = 100.0
    stop_loss_percent: float = 2.0
    take_profit_percent: float = 5.0
    max_daily_loss: float = 100.0

    def __post_init__(self) -> None:
        if self.short_ma_period < 1 or self.long_ma_period < 1:
            raise ValueError("MA periods must be >= 1")
        for name in ("trade_amount", "stop_loss_percent", "take_profit_percent", "max_daily_loss"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be > 0, got {getattr(self, name)}")


def _env_path(project_root: Optional[Path] = None) -> Path:
    root = project_root or Path.cwd()
    return root / ".env"


def load_dotenv_if_exists(project_root: Optional[Path] = None) -> None:
    """Load .env from project root if present."""
    path = _env_path(project_root)
    if path.exists():
        load_dotenv(path)


def load_config(config_path: Optional[Path] = None, project_root: Optional[Path] = None) -> "Config":
    """Load config.yaml and overlay with env. Returns Config."""
    load_dotenv_if_exists(project_root)
    root = project_root or Path.cwd()
    path = config_path or root / "config.yaml"
    data: dict[str, Any] = {}
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    # Env overrides (for secrets and overrides)
    def env(key: str, default: str = "") -> str:
        return os.getenv(key, default).strip()

    def env_bool(key: str, default: bool = False) -> bool:
        return os.getenv(key, str(default)).lower() in ("true", "1", "yes")

    def env_int(key: str, default: int = 0) -> int:
        try:
            return int(os.getenv(key, str(default)))
        except ValueError:
            return default

    def env_float(key: str, default: float = 0.0) -> float:
        try:
            return float(os.getenv(key, str(default)))
        except ValueError:
            return default

    bot = data.get("bot", {})
    strategy = data.get("strategy", {})
    risk = data.get("risk", {})
    portfolio = data.get("portfolio", {})
    sentiment = data.get("sentiment", {})
    backtest = data.get("backtest", {})
    logging_cfg = data.get("logging", {})
    telegram = data.get("telegram", {})

    return Config(
        # API (env only; public klines work without keys)
        binance_api_key=env("BINANCE_API_KEY"),
        binance_api_secret=env("BINANCE_API_SECRET"),
        # Bot
        trading_pair=env("TRADING_PAIR", bot.get("trading_pair", "BTCUSDT")).upper(),
        interval=env("INTERVAL", bot.get("interval", "1m")),
        candle_limit=env_int("CANDLE_LIMIT", bot.get("candle_limit", 100)),
        is_active=env_bool("BOT_ACTIVE", bot.get("is_active", False)),
        poll_seconds=env_int("POLL_SECONDS", bot.get("poll_seconds", 0)),
        # Strategy
        short_ma_period=env_int("SHORT_MA_PERIOD", strategy.get("short_ma_period", 10)),
        long_ma_period=env_int("LONG_MA_PERIOD", strategy.get("long_ma_period", 50)),
        # Risk
        trade_amount=env_float("TRADE_AMOUNT", risk.get("trade_amount", 100.0)),
        stop_loss_percent=env_float("STOP_LOSS_PERCENT", risk.get("stop_loss_percent", 2.0)),
        take_profit_percent=env_float("TAKE_PROFIT_PERCENT", risk.get("take_profit_percent", 5.0)),
        max_daily_loss=env_float("MAX_DAILY_LOSS", risk.get("max_daily_loss", 100.0)),
        # Portfolio
        initial_balance=env_float("INITIAL_BALANCE", portfolio.get("initial_balance", 10000.0)),
        ledger_path=portfolio.get("ledger_path"),
        # Sentiment stand-in
        sentiment_mode=env("SENTIMENT_MODE", sentiment.get("mode", "random")).lower(),
        sentiment_value=env_float("SENTIMENT_VALUE", sentiment.get("value", 0.0)),
        sentiment_seed=sentiment.get("seed"),
        # Telegram
        telegram_bot_token=env("TELEGRAM_BOT_TOKEN", telegram.get("bot_token", "")),
        telegram_chat_id=env("TELEGRAM_CHAT_ID", telegram.get("chat_id", "")),
        # Logging
        log_level=env("LOG_LEVEL", logging_cfg.get("level", "INFO")),
        log_dir=Path(logging_cfg.get("log_dir", "logs")),
        log_file=logging_cfg.get("log_file", "regime_bot.log"),
        # Backtest
        backtest_interval=backtest.get("interval", "1h"),
        backtest_limit=int(backtest.get("limit", 1000)),
        backtest_csv_path=backtest.get("csv_path"),
        backtest_initial_balance=backtest.get("initial_balance"),
    )


class Config:
    """Unified configuration. Immutable after load."""

    __slots__ = (
        "binance_api_key", "binance_api_secret",
        "trading_pair", "interval", "candle_limit", "is_active", "poll_seconds",
        "short_ma_period", "long_ma_period",
        "trade_amount", "stop_loss_percent", "take_profit_percent", "max_daily_loss",
        "initial_balance", "ledger_path",
        "sentiment_mode", "sentiment_value", "sentiment_seed",
        "telegram_bot_token", "telegram_chat_id",
        "log_level", "log_dir", "log_file",
        "backtest_interval", "backtest_limit", "backtest_csv_path", "backtest_initial_balance",
    )

    def __init__(
        self,
        binance_api_key: str = "",
        binance_api_secret: str = "",
        trading_pair: str = "BTCUSDT",
        interval: str = "1m",
        candle_limit: int = 100,
        is_active: bool = False,
        poll_seconds: int = 0,
        short_ma_period: int = 10,
        long_ma_period: int = 50,
        trade_amount: float = 100.0,
        stop_loss_percent: float = 2.0,
        take_profit_percent: float = 5.0,
        max_daily_loss: float = 100.0,
        initial_balance: float = 10000.0,
        ledger_path: Optional[str] = None,
        sentiment_mode: str = "random",
        sentiment_value: float = 0.0,
        sentiment_seed: Optional[int] = None,
        telegram_bot_token: str = "",
        telegram_chat_id: str = "",
        log_level: str = "INFO",
        log_dir: Path = None,
        log_file: str = "regime_bot.log",
        backtest_interval: str = "1h",
        backtest_limit: int = 1000,
        backtest_csv_path: Optional[str] = None,
        backtest_initial_balance: Optional[float] = None,
    ):
        self.binance_api_key = binance_api_key
        self.binance_api_secret = binance_api_secret
        self.trading_pair = trading_pair
        self.interval = interval
        self.candle_limit = candle_limit
        self.is_active = is_active
        self.poll_seconds = poll_seconds
        self.short_ma_period = short_ma_period
        self.long_ma_period = long_ma_period
        self.trade_amount = trade_amount
        self.stop_loss_percent = stop_loss_percent
        self.take_profit_percent = take_profit_percent
        self.max_daily_loss = max_daily_loss
        self.initial_balance = initial_balance
        self.ledger_path = ledger_path
        self.sentiment_mode = sentiment_mode
        self.sentiment_value = sentiment_value
        self.sentiment_seed = sentiment_seed
        self.telegram_bot_token = telegram_bot_token
        self.telegram_chat_id = telegram_chat_id
        self.log_level = log_level
        self.log_dir = Path(log_dir) if log_dir else Path("logs")
        self.log_file = log_file
        self.backtest_interval = backtest_interval
        self.backtest_limit = backtest_limit
        self.backtest_csv_path = backtest_csv_path
        self.backtest_initial_balance = (
            float(backtest_initial_balance) if backtest_initial_balance is not None else None
        )

    @property
    def risk(self) -> RiskConfig:
        """Snapshot of the risk parameters. Raises ValueError on invalid values."""
        return RiskConfig(
            short_ma_period=self.short_ma_period,
            long_ma_period=self.long_ma_period,
            trade_amount=self.trade_amount,
            stop_loss_percent=self.stop_loss_percent,
            take_profit_percent=self.take_profit_percent,
            max_daily_loss=self.max_daily_loss,
        )
