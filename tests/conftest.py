"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from decimal import Decimal
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from margin_client.chains.evm.contract import Contract
from margin_client.config import AppConfig, ChainConfig, MarginConfig
from margin_client.models import LoanOffering, TransactionReceipt

MARGIN_ADDRESS = "0x" + "ee" * 20
TRADER = "0x" + "a1" * 20
EXCHANGE_WRAPPER = "0x" + "0e" * 20


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_chain_config() -> ChainConfig:
    return ChainConfig(
        rpc_endpoints=("https://rpc1.example.com", "https://rpc2.example.com"),
        rpc_timeout=10,
        receipt_poll_interval=0.1,
    )


@pytest.fixture()
def sample_app_config(sample_chain_config: ChainConfig) -> AppConfig:
    return AppConfig(
        chains={"local": sample_chain_config},
        margin=MarginConfig(chain="local", address=MARGIN_ADDRESS, gas=4_000_000),
    )


SAMPLE_YAML = textwrap.dedent("""\
    chains:
      local:
        rpc_endpoints: ["https://rpc.example.com"]
        rpc_timeout: 10
        receipt_poll_interval: 0.5
    margin:
      chain: local
      address: "0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee"
      gas: 4000000
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file


# ---------------------------------------------------------------------------
# Model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_loan_offering() -> LoanOffering:
    return LoanOffering(
        owed_token="0x" + "01" * 20,
        held_token="0x" + "02" * 20,
        payer="0x" + "03" * 20,
        owner="0x" + "04" * 20,
        taker="0x" + "05" * 20,
        position_owner="0x" + "06" * 20,
        fee_recipient="0x" + "07" * 20,
        lender_fee_token_address="0x" + "08" * 20,
        taker_fee_token_address="0x" + "09" * 20,
        max_amount=1000,
        min_amount=100,
        min_held_token=50,
        lender_fee=7,
        taker_fee=3,
        expiration_timestamp=1_700_000_000,
        salt=42,
        call_time_limit=86_400,
        max_duration=2_592_000,
        interest_rate=Decimal("3.65"),
        interest_period=3600,
        signature="0x" + "ab" * 65,
    )


@pytest.fixture()
def sample_receipt() -> TransactionReceipt:
    return TransactionReceipt(
        transaction_hash="0x" + "cd" * 32,
        block_number=12,
        status=1,
        gas_used=21_000,
    )


# ---------------------------------------------------------------------------
# Contract fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_contract(sample_receipt: TransactionReceipt) -> MagicMock:
    contract = MagicMock(spec=Contract)
    contract.address = MARGIN_ADDRESS
    contract.transact.return_value = sample_receipt
    return contract
