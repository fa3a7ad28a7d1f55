"""Unit tests for core.config."""

import pytest

from tradelab.core.config import TradingSettings, load_config
from tradelab.core.errors import InvalidConfiguration

ENV_KEYS = [
    "DATA_SOURCE", "SYMBOL", "TIMEFRAME", "HISTORY_COUNT", "REQUEST_TIMEOUT", "STRATEGY",
    "STOP_LOSS_PCT", "TAKE_PROFIT_PCT", "RISK_PER_TRADE_PCT", "INITIAL_CAPITAL", "STORE_PATH",
    "TELEGRAM_BOT_TOKEN", "TELEGRAM_CHAT_ID",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults_without_file(tmp_path):
    config = load_config(project_root=tmp_path)
    assert config.data_source == "upbit"
    assert config.instrument == "KRW-BTC"
    assert config.strategy == "SMA_CROSS"
    assert config.stop_loss_pct == 5.0
    assert config.take_profit_pct == 10.0


def test_yaml_values(tmp_path):
    (tmp_path / "config.yaml").write_text(
        "data:\n  instrument: krw-eth\n  timeframe: 15m\n"
        "strategy:\n  name: rsi_reversal\n  params:\n    period: 7\n"
        "risk:\n  stop_loss_pct: 2\n  take_profit_pct: 6\n  risk_per_trade_pct: 25\n"
        "live:\n  strategy_interval: 10\n",
        encoding="utf-8",
    )
    config = load_config(project_root=tmp_path)
    assert config.instrument == "KRW-ETH"
    assert config.timeframe == "15m"
    assert config.strategy == "RSI_REVERSAL"
    assert config.strategy_params == {"period": 7}
    assert config.strategy_interval == 10.0
    settings = config.trading_settings().validate()
    assert settings.risk_per_trade_pct == 25


def test_env_overrides_yaml(tmp_path, monkeypatch):
    (tmp_path / "config.yaml").write_text("risk:\n  stop_loss_pct: 2\n", encoding="utf-8")
    monkeypatch.setenv("STOP_LOSS_PCT", "3.5")
    monkeypatch.setenv("SYMBOL", "btcusdt")
    config = load_config(project_root=tmp_path)
    assert config.stop_loss_pct == 3.5
    assert config.instrument == "BTCUSDT"


@pytest.mark.parametrize("overrides", [
    {"strategy": "MOON"},
    {"stop_loss_pct": 0},
    {"take_profit_pct": -1},
    {"stop_loss_pct": 10, "take_profit_pct": 5},
    {"risk_per_trade_pct": 0},
    {"risk_per_trade_pct": 101},
    {"strategy": "PRICE_TARGET"},
    {"strategy": "PRICE_TARGET", "buy_price": 200, "sell_price": 100},
    {"instrument": ""},
])
def test_validate_rejects(overrides):
    fields = {"instrument": "KRW-BTC"}
    fields.update(overrides)
    with pytest.raises(InvalidConfiguration):
        TradingSettings(**fields).validate()


def test_validate_accepts_price_target():
    settings = TradingSettings(instrument="KRW-BTC", strategy="PRICE_TARGET", buy_price=100, sell_price=200)
    assert settings.validate() is settings


def test_settings_dict_round_trip():
    settings = TradingSettings(instrument="KRW-BTC", strategy="ENSEMBLE", params={"threshold": 1.5})
    assert TradingSettings.from_dict(settings.to_dict()) == settings
