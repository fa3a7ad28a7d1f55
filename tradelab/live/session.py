"""
Live decision session: one instrument, one strategy, one persisted ledger.

Two timers drive it:
  - strategy tick: fetch the newest bars, append them to the rolling buffer,
    recompute signals, apply exit-before-entry rules to each new bar
  - protective tick (faster): re-check only stop-loss / take-profit against
    the latest price so exits are not starved by the slower cadence

Both ticks share one guard; a tick that finds the guard held is skipped.
Data failures make a tick a no-op. Once stop() returns nothing mutates the ledger.
"""

from __future__ import annotations
import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

from tradelab.core.config import TradingSettings
from tradelab.core.errors import DataUnavailable, InvalidConfiguration, MissingConfiguration
from tradelab.core.types import Bar, Side, Signal, TradeReason, Trade
from tradelab.data.base import MarketDataSource
from tradelab.data.frames import bars_to_frame
from tradelab.live.scheduler import PeriodicTask
from tradelab.portfolio.ledger import Ledger
from tradelab.reporting.sink import ReportingSink
from tradelab.risk.manager import RiskManager
from tradelab.storage.store import PersistenceStore
from tradelab.strategies.base import BaseStrategy
from tradelab.strategies.registry import build_strategy

logger = logging.getLogger("tradelab.live")


class LiveSession:
    """Owns settings, price buffer, ledger, and timer handles. No shared globals."""

    def __init__(
        self,
        source: MarketDataSource,
        store: PersistenceStore,
        sink: Optional[ReportingSink] = None,
        *,
        timeframe: str = "1h",
        strategy_interval: float = 5.0,
        protective_interval: float = 1.0,
        request_timeout: float = 2.0,
        buffer_size: int = 500,
        history_count: int = 200,
        fetch_count: int = 5,
        initial_cash: float = 10000.0,
        closed_bars_only: bool = True,
    ):
        if buffer_size < 2:
            raise InvalidConfiguration(f"buffer_size must be >= 2, got {buffer_size}")
        self.source = source
        self.store = store
        self.sink = sink
        self.timeframe = timeframe
        self.strategy_interval = strategy_interval
        self.protective_interval = protective_interval
        self.request_timeout = request_timeout
        self.buffer_size = buffer_size
        self.history_count = history_count
        self.fetch_count = fetch_count
        self.initial_cash = initial_cash
        # Drop the still-forming newest bar from every fetch (no repainting)
        self.closed_bars_only = closed_bars_only

        self.settings: Optional[TradingSettings] = None
        self.strategy: Optional[BaseStrategy] = None
        self.risk_manager: Optional[RiskManager] = None
        self.ledger: Optional[Ledger] = None
        self._buffer: List[Bar] = []
        self._offset = 0  # absolute bar index of _buffer[0]
        self._last_price: Optional[float] = None
        self._running = False
        self._starting = False
        self._generation = 0  # bumped by stop(); a start() that sees it change aborts
        self._guard: Optional[asyncio.Lock] = None
        self._timers: List[PeriodicTask] = []

    @property
    def running(self) -> bool:
        return self._running

    @property
    def buffer(self) -> List[Bar]:
        return list(self._buffer)

    # ── lifecycle ────────────────────────────────────────────────────────────

    async def start(self) -> None:
        """
        Load and validate settings, restore the ledger, seed the buffer, start timers.
        Raises MissingConfiguration / InvalidConfiguration. A call while the session
        is running or still starting is a no-op; a stop() during the history fetch
        cancels the start.
        """
        if self._running or self._starting:
            logger.debug("Session already running or starting")
            return
        self._starting = True
        generation = self._generation
        try:
            await self._start(generation)
        finally:
            if generation == self._generation:
                self._starting = False

    async def _start(self, generation: int) -> None:
        settings = self.store.load_settings()
        if settings is None:
            raise MissingConfiguration("no saved trading settings; save settings before starting")
        settings.validate()
        self.settings = settings
        self.strategy = build_strategy(settings.strategy, settings.params, settings)
        self.risk_manager = RiskManager.from_settings(settings)
        self.ledger = self._restore_ledger(settings.instrument)
        self._guard = asyncio.Lock()
        self._buffer = []
        self._offset = 0
        try:
            bars = await self._fetch(self.source.get_historical_bars, settings.instrument, self.timeframe, self.history_count)
            self._append(bars)
        except DataUnavailable as e:
            logger.warning("Could not seed history for %s: %s (starting empty)", settings.instrument, e)
        if generation != self._generation:
            logger.info("Live session start cancelled by stop()")
            return

        self._running = True
        self._timers = [
            PeriodicTask("strategy", self.strategy_interval, self.strategy_tick),
            PeriodicTask("protective", self.protective_interval, self.protective_tick),
        ]
        for t in self._timers:
            t.start()
        logger.info(
            "Live session started: %s %s sl=%.2f%% tp=%.2f%% risk=%.2f%% cash=%.2f buffer=%d",
            settings.instrument, settings.strategy, settings.stop_loss_pct, settings.take_profit_pct,
            settings.risk_per_trade_pct, self.ledger.cash, len(self._buffer),
        )

    async def stop(self) -> None:
        """Cancel both timers and in-flight ticks. Safe before start and when called twice."""
        was_running = self._running
        self._running = False
        self._starting = False
        self._generation += 1
        timers, self._timers = self._timers, []
        for t in timers:
            await t.stop()
        if was_running:
            logger.info("Live session stopped")

    def _restore_ledger(self, instrument: str) -> Ledger:
        data = self.store.load_ledger()
        if not data:
            return Ledger(cash=self.initial_cash, instrument=instrument)
        ledger = Ledger.from_dict(data)
        if ledger.instrument != instrument:
            if ledger.has_position:
                raise InvalidConfiguration(
                    f"saved ledger holds an open {ledger.instrument} position; close it before trading {instrument}"
                )
            return Ledger(cash=ledger.cash, instrument=instrument)
        return ledger

    # ── ticks ────────────────────────────────────────────────────────────────

    async def strategy_tick(self) -> None:
        """Append new bars and decide on each of them in order."""
        if not self._running:
            return
        if self._guard.locked():
            logger.debug("Strategy tick skipped: another tick in progress")
            return
        async with self._guard:
            try:
                bars = await self._fetch(
                    self.source.get_historical_bars, self.settings.instrument, self.timeframe, self.fetch_count
                )
                if self._buffer and bars and min(b.time for b in bars) > self._buffer[-1].time:
                    # Nothing overlaps the buffer tail: bars were missed, refill from history
                    logger.warning(
                        "Strategy tick: gap after %s, backfilling up to %d bars",
                        self._buffer[-1].time, self.history_count,
                    )
                    bars = await self._fetch(
                        self.source.get_historical_bars, self.settings.instrument, self.timeframe, self.history_count
                    )
            except DataUnavailable as e:
                logger.warning("Strategy tick: no data this tick (%s)", e)
                return
            if not self._running:
                return
            new_positions = self._append(bars)
            if not new_positions:
                return
            self._last_price = self._buffer[-1].close
            signals = self.strategy.signals_by_index(bars_to_frame(self._buffer))
            for pos in new_positions:
                self._decide(pos, signals.get(pos))

    async def protective_tick(self) -> None:
        """Stop-loss / take-profit only, against the latest price."""
        if not self._running or not self.ledger.has_position:
            return
        if self._guard.locked():
            logger.debug("Protective tick skipped: another tick in progress")
            return
        async with self._guard:
            try:
                bar = await self._fetch(self.source.get_latest_bar, self.settings.instrument)
            except DataUnavailable as e:
                logger.warning("Protective tick: no price this tick (%s)", e)
                return
            if not self._running or not self.ledger.has_position:
                return
            self._last_price = bar.close
            reason = self.risk_manager.protective_exit(self.ledger.position, bar.close)
            if reason is not None:
                index = self._offset + max(0, len(self._buffer) - 1)
                self._record(self.ledger.sell(index, bar.time, bar.close, reason))

    # ── helpers ──────────────────────────────────────────────────────────────

    async def _fetch(self, fn: Callable[..., Any], *args: Any) -> Any:
        """Run a blocking source call in a worker thread, bounded by request_timeout."""
        try:
            return await asyncio.wait_for(asyncio.to_thread(fn, *args), timeout=self.request_timeout)
        except asyncio.TimeoutError:
            raise DataUnavailable(f"{getattr(fn, '__name__', 'source call')} timed out after {self.request_timeout}s") from None

    def _append(self, bars: List[Bar]) -> List[int]:
        """
        Append bars strictly newer than the buffer tail; trim to buffer_size.
        Returns buffer positions of the bars that were appended.
        """
        bars = sorted(bars, key=lambda b: b.time)
        if self.closed_bars_only and bars:
            bars = bars[:-1]
        added = 0
        for b in bars:
            if self._buffer and b.time <= self._buffer[-1].time:
                continue
            self._buffer.append(b)
            added += 1
        overflow = len(self._buffer) - self.buffer_size
        if overflow > 0:
            del self._buffer[:overflow]
            self._offset += overflow
        first = max(0, len(self._buffer) - added)
        return list(range(first, len(self._buffer)))

    def _decide(self, pos: int, signal: Optional[Signal]) -> None:
        bar = self._buffer[pos]
        index = self._offset + pos
        if self.ledger.has_position:
            reason = self.risk_manager.exit_reason(self.ledger.position, bar.close, signal)
            if reason is not None:
                self._record(self.ledger.sell(index, bar.time, bar.close, reason))
        elif signal is not None and signal.side == Side.BUY:
            sizing = self.risk_manager.position_size(self.ledger.cash, bar.close)
            if not sizing.allowed:
                logger.info("BUY signal at %d ignored: %s", index, sizing.reason)
                return
            self._record(self.ledger.buy(index, bar.time, bar.close, sizing.quantity, TradeReason.SIGNAL))

    def _record(self, trade: Trade) -> None:
        """Persist ledger + history, then publish. Sink errors are logged only."""
        self.store.save_ledger(self.ledger.to_dict())
        self.store.append_trade_history(trade)
        logger.info(
            "Executed %s %s qty=%.8f @ %.4f reason=%s", trade.side.value, trade.instrument,
            trade.quantity, trade.price, trade.reason.value,
        )
        if self.sink is not None:
            try:
                self.sink.publish_trade(trade)
            except Exception:
                logger.exception("Reporting sink failed on trade update")

    def status(self) -> Dict[str, Any]:
        """Snapshot for display."""
        ledger = self.ledger
        price = self._last_price if self._last_price is not None else (self._buffer[-1].close if self._buffer else None)
        return {
            "running": self._running,
            "instrument": self.settings.instrument if self.settings else None,
            "strategy": self.settings.strategy if self.settings else None,
            "cash": ledger.cash if ledger else None,
            "position": ledger.position.to_dict() if ledger and ledger.position else None,
            "equity": ledger.equity(price) if ledger and price is not None else None,
            "buffer_length": len(self._buffer),
        }
