from ledger_agent.config import Settings


def test_legacy_millisecond_waiting_time(monkeypatch):
    """Older deployments configure waits in milliseconds."""

    monkeypatch.setenv("TX_WAITING_TIME", "1500")
    monkeypatch.delenv("TX_WAITING_TIME_SECONDS", raising=False)
    monkeypatch.setenv("SWAP_WAITING_TIME", "250")
    monkeypatch.delenv("SWAP_WAITING_TIME_SECONDS", raising=False)

    settings = Settings()

    assert settings.tx_waiting_time_seconds == 1.5
    assert settings.swap_waiting_time_seconds == 0.25


def test_seconds_setting_wins_over_legacy(monkeypatch):
    monkeypatch.setenv("TX_WAITING_TIME", "1500")
    monkeypatch.setenv("TX_WAITING_TIME_SECONDS", "3")

    settings = Settings()

    assert settings.tx_waiting_time_seconds == 3.0


def test_rpc_aliases(monkeypatch):
    """Ledger endpoint and key load from the TON_RPC_* names."""

    monkeypatch.delenv("TONCENTER_BASE_URL", raising=False)
    monkeypatch.delenv("TONCENTER_API_KEY", raising=False)
    monkeypatch.setenv("TON_RPC_URL", "https://testnet.toncenter.com/api/v2/jsonRPC")
    monkeypatch.setenv("TON_RPC_API_KEY", "rpc-key")

    settings = Settings()

    assert settings.toncenter_base_url == "https://testnet.toncenter.com/api/v2/jsonRPC"
    assert settings.toncenter_api_key == "rpc-key"
    assert settings.has_toncenter_key


def test_network_flag(monkeypatch):
    monkeypatch.setenv("TON_NETWORK", "testnet")
    assert Settings().is_mainnet is False

    monkeypatch.setenv("TON_NETWORK", "Mainnet")
    assert Settings().is_mainnet is True


def test_step_budgets(monkeypatch):
    monkeypatch.setenv("TX_WAITING_STEPS", "10")
    monkeypatch.setenv("SWAP_WAITING_STEPS", "20")

    settings = Settings()

    assert settings.tx_waiting_steps == 10
    assert settings.swap_waiting_steps == 20
