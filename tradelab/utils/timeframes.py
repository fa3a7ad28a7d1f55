"""Timeframe string conversions."""

_UPBIT_MINUTE_UNITS = (1, 3, 5, 10, 15, 30, 60, 240)


def timeframe_minutes(tf: str) -> int:
    """Convert a timeframe (e.g. '5m', '1h', '1d', '1w') to minutes."""
    tf = tf.strip().lower()
    if tf.endswith("m"):
        return int(tf[:-1])
    if tf.endswith("h"):
        return int(tf[:-1]) * 60
    if tf.endswith("d"):
        return int(tf[:-1]) * 60 * 24
    if tf.endswith("w"):
        return int(tf[:-1]) * 60 * 24 * 7
    raise ValueError(f"Unsupported timeframe: {tf}")


def upbit_candle_unit(tf: str) -> str:
    """Upbit candle path segment: 'minutes/60', 'days' or 'weeks'."""
    minutes = timeframe_minutes(tf)
    if minutes in _UPBIT_MINUTE_UNITS:
        return f"minutes/{minutes}"
    if minutes == 60 * 24:
        return "days"
    if minutes == 60 * 24 * 7:
        return "weeks"
    raise ValueError(f"Timeframe not offered by Upbit: {tf}")
