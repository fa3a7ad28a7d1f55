#!/usr/bin/env python3
"""
tradelab CLI: backtest | live
Usage:
  python main.py backtest [--config config.yaml] [--csv prices.csv] [--strategy NAME]
  python main.py live [--config config.yaml]
"""

from __future__ import annotations
import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Project root
ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from tradelab.analytics.metrics import format_metrics
from tradelab.backtesting.engine import BacktestEngine
from tradelab.core.config import Config, load_config
from tradelab.core.errors import DataUnavailable, InvalidConfiguration, MissingConfiguration
from tradelab.core.logger import setup_logging
from tradelab.data.base import MarketDataSource
from tradelab.data.binance import BinanceMarketData
from tradelab.data.frames import bars_to_frame, load_csv_bars
from tradelab.data.upbit import UpbitMarketData
from tradelab.live.session import LiveSession
from tradelab.reporting.sink import LoggingSink, MultiSink, ReportingSink, TelegramSink
from tradelab.risk.manager import RiskManager
from tradelab.storage.store import JsonFileStore
from tradelab.strategies.registry import build_strategy

logger = logging.getLogger("tradelab")


def create_source(config: Config) -> MarketDataSource:
    if config.data_source == "binance":
        return BinanceMarketData(config.binance_api_key, config.binance_api_secret, timeout=config.request_timeout)
    if config.data_source == "upbit":
        return UpbitMarketData(timeout=config.request_timeout)
    raise InvalidConfiguration(f"unknown data source {config.data_source!r}")


def create_sink(config: Config) -> ReportingSink:
    sinks: list[ReportingSink] = [LoggingSink()]
    if config.telegram_bot_token and config.telegram_chat_id:
        sinks.append(TelegramSink(config.telegram_bot_token, config.telegram_chat_id))
    return MultiSink(sinks)


def run_backtest(config_path: Path | None, csv_path: Path | None, strategy_name: str | None) -> int:
    """Run one backtest using config and either a CSV file or the configured data source."""
    config = load_config(config_path, ROOT)
    setup_logging(config.log_level, config.log_dir, config.log_file, config.log_levels)
    settings = config.trading_settings()
    if strategy_name:
        settings.strategy = strategy_name.upper()
    try:
        settings.validate()
        strategy = build_strategy(settings.strategy, settings.params, settings)
        risk_manager = RiskManager.from_settings(settings)
        if csv_path is not None:
            df = load_csv_bars(csv_path)
        else:
            source = create_source(config)
            df = bars_to_frame(source.get_historical_bars(settings.instrument, config.timeframe, config.history_count))
    except InvalidConfiguration as e:
        logger.error("Invalid configuration: %s", e)
        return 1
    except DataUnavailable as e:
        logger.error("No price data: %s", e)
        return 1
    engine = BacktestEngine(
        strategy=strategy,
        risk_manager=risk_manager,
        initial_capital=config.initial_capital,
        instrument=settings.instrument,
    )
    result = asyncio.run(engine.run_async(df, chunk_size=config.backtest_chunk_size))
    print("\n--- Backtest Results ---")
    print(f"Instrument: {settings.instrument} | Strategy: {settings.strategy} | Bars: {len(df)}")
    print(format_metrics(result.metrics))
    create_sink(config).publish_backtest(result.to_report())
    return 0


async def _live(config: Config) -> None:
    store = JsonFileStore(config.store_path)
    if store.load_settings() is None:
        store.save_settings(config.trading_settings())
        logger.info("Saved settings from config to %s", config.store_path)
    session = LiveSession(
        create_source(config),
        store,
        create_sink(config),
        timeframe=config.timeframe,
        strategy_interval=config.strategy_interval,
        protective_interval=config.protective_interval,
        request_timeout=config.request_timeout,
        buffer_size=config.buffer_size,
        history_count=config.history_count,
        initial_cash=config.initial_capital,
    )
    await session.start()
    try:
        while True:
            await asyncio.sleep(60)
            logger.info("Status: %s", session.status())
    finally:
        await session.stop()


def run_live(config_path: Path | None) -> int:
    """Run the live decision loop until interrupted."""
    config = load_config(config_path, ROOT)
    setup_logging(config.log_level, config.log_dir, config.log_file, config.log_levels)
    try:
        asyncio.run(_live(config))
    except (MissingConfiguration, InvalidConfiguration) as e:
        logger.error("Cannot start live session: %s", e)
        return 1
    except KeyboardInterrupt:
        logger.info("Shutdown by user")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="tradelab CLI")
    parser.add_argument("mode", choices=["backtest", "live"], help="Run backtest or live")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    parser.add_argument("--csv", type=Path, default=None, help="Backtest: CSV with time,close[,open,high,low,volume]")
    parser.add_argument("--strategy", default=None, help="Backtest: override strategy name")
    args = parser.parse_args()
    if args.mode == "backtest":
        return run_backtest(args.config, args.csv, args.strategy)
    return run_live(args.config)


if __name__ == "__main__":
    sys.exit(main())
