"""Telegram notifications. Never log token or chat_id."""

from __future__ import annotations
import logging

import requests

from tradelab.core.types import Trade

logger = logging.getLogger("tradelab.utils.telegram")


def format_trade_message(trade: Trade) -> str:
    """One-line trade summary."""
    return (
        f"{trade.side.value} {trade.instrument} qty={trade.quantity:.8f} @ {trade.price:.4f} "
        f"({trade.amount:.2f}) reason={trade.reason.value}"
    )


def send_telegram(text: str, bot_token: str = "", chat_id: str = "", timeout: float = 10.0) -> bool:
    """Send message to Telegram. Returns True on success; False if not configured or on failure."""
    if not bot_token or not chat_id:
        logger.debug("Telegram not configured, skipping message (len=%d)", len(text))
        return False
    url = f"https://api.telegram.org/bot{bot_token}/sendMessage"
    try:
        r = requests.post(url, json={"chat_id": chat_id, "text": text}, timeout=timeout)
    except requests.RequestException as e:
        logger.warning("Telegram send error: %s", type(e).__name__)
        return False
    if r.status_code != 200:
        logger.warning("Telegram send failed: %s %s", r.status_code, r.text[:200])
        return False
    return True
