"""Utils: Telegram, timeframes."""

from tradelab.utils.telegram import send_telegram
from tradelab.utils.timeframes import timeframe_minutes, upbit_candle_unit

__all__ = ["send_telegram", "timeframe_minutes", "upbit_candle_unit"]
