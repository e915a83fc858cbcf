import pytest
from unittest.mock import AsyncMock, MagicMock

from wallet_intents.config import ChainConfig, Settings
from wallet_intents.core.session.factory import build_session_manager
from wallet_intents.core.session.models import (
    GetTransactionCount,
    PeerMetadata,
    SessionProposal,
    WalletAccount,
)
from wallet_intents.core.session.persistence import FileSessionStateStore, InMemorySessionStateStore

ACCOUNT = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"
PEER = PeerMetadata(name="Example dApp", url="https://dapp.example")


@pytest.fixture
def config(tmp_path):
    return Settings(
        _env_file=None,
        chains={10: ChainConfig(name="Optimism", rpc_url="https://rpc.example/10")},
        session_state_path=tmp_path / "last_session.json",
        transaction_count_placeholder="0x2a",
    )


@pytest.fixture
def transport():
    transport = MagicMock()
    transport.connect = AsyncMock(return_value=SessionProposal(session_id="s1", uri="wc:a", peer=PEER))
    transport.approve = AsyncMock()
    transport.disconnect = AsyncMock()
    transport.fulfill = AsyncMock()
    transport.reject = AsyncMock()
    return transport


@pytest.fixture
def approver():
    approver = MagicMock()
    approver.choose_chain = AsyncMock(return_value=10)
    return approver


def build(config, transport, approver, **kwargs):
    return build_session_manager(
        WalletAccount(address=ACCOUNT),
        transport,
        approver,
        MagicMock(),
        MagicMock(),
        config=config,
        **kwargs,
    )


@pytest.mark.asyncio
async def test_wires_chains_state_file_and_placeholder(config, transport, approver):
    manager = build(config, transport, approver)

    await manager.connect("wc:a")

    approver.choose_chain.assert_awaited_once_with(PEER, [10])
    assert FileSessionStateStore(config.session_state_path).load().chain_id == 10

    outcome = await manager.handle_request(GetTransactionCount(request_id=1, origin="https://dapp.example"))
    assert outcome.value == "0x2a"


@pytest.mark.asyncio
async def test_explicit_store(config, transport, approver):
    store = InMemorySessionStateStore()
    manager = build(config, transport, approver, store=store)

    await manager.connect("wc:a")

    assert store.load().session_id == "s1"
    assert not config.session_state_path.exists()
