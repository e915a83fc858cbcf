"""
Tests for SessionLifecycleManager.

Covers:
- connect / decline / handshake failure
- At most one connected session per wallet
- Reconnect from persisted state (once, failures ignored)
- Idempotent disconnect
- Request handling through the active session
"""

import asyncio

import pytest
from unittest.mock import AsyncMock, MagicMock

from wallet_intents.config import ChainConfig
from wallet_intents.core.chain_types import ChainRegistry
from wallet_intents.core.session.dispatcher import SessionRequestDispatcher
from wallet_intents.core.session.errors import DispatchErrorKind, SessionConnectionError
from wallet_intents.core.session.lifecycle import SessionLifecycleManager
from wallet_intents.core.session.models import (
    AccountCapability,
    GetTransactionCount,
    PeerMetadata,
    Rejection,
    ResponseEnvelope,
    SessionDescriptor,
    SessionProposal,
    SessionState,
    SignTransaction,
    UnconfirmedTransaction,
    WalletAccount,
)
from wallet_intents.core.session.persistence import InMemorySessionStateStore

ACCOUNT = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"
ORIGIN = "https://dapp.example/session"
PEER = PeerMetadata(name="Example dApp", url="https://dapp.example")


# =============================================================================
# Fixtures
# =============================================================================

def proposal_for(uri: str) -> SessionProposal:
    return SessionProposal(session_id=f"session-{uri[-1]}", uri=uri, peer=PEER)


@pytest.fixture
def chains():
    return ChainRegistry({
        1: ChainConfig(name="Ethereum", rpc_url="https://rpc.example/1"),
        137: ChainConfig(name="Polygon", rpc_url="https://rpc.example/137"),
    })


@pytest.fixture
def transport():
    transport = MagicMock()
    transport.connect = AsyncMock(side_effect=proposal_for)
    transport.approve = AsyncMock()
    transport.reject_proposal = AsyncMock()
    transport.reconnect = AsyncMock(return_value=PEER)
    transport.disconnect = AsyncMock()
    transport.fulfill = AsyncMock()
    transport.reject = AsyncMock()
    return transport


@pytest.fixture
def approver():
    approver = MagicMock()
    approver.choose_chain = AsyncMock(return_value=1)
    return approver


@pytest.fixture
def state_store():
    return InMemorySessionStateStore()


@pytest.fixture
def ui():
    ui = MagicMock()
    ui.display_error = AsyncMock()
    return ui


def make_manager(transport, approver, state_store, chains, ui, capability=AccountCapability.SIGNING):
    return SessionLifecycleManager(
        wallet=WalletAccount(address=ACCOUNT, capability=capability),
        transport=transport,
        approver=approver,
        store=state_store,
        chains=chains,
        dispatcher_factory=lambda session: SessionRequestDispatcher(session, ui, MagicMock()),
    )


@pytest.fixture
def manager(transport, approver, state_store, chains, ui):
    return make_manager(transport, approver, state_store, chains, ui)


# =============================================================================
# Connect
# =============================================================================

class TestConnect:
    @pytest.mark.asyncio
    async def test_connect(self, manager, transport, approver, state_store):
        session = await manager.connect("wc:a")

        assert manager.state == SessionState.CONNECTED
        assert manager.session is session
        assert session.id == "session-a"
        assert session.chain_id == 1
        approver.choose_chain.assert_awaited_once_with(PEER, [1, 137])
        transport.approve.assert_awaited_once()
        assert state_store.load().session_id == "session-a"

    @pytest.mark.asyncio
    async def test_connect_while_connected_tears_down_first(self, manager, transport):
        await manager.connect("wc:a")
        second = await manager.connect("wc:b")

        transport.disconnect.assert_awaited_once_with("session-a")
        assert transport.connect.await_count == 2
        assert manager.session is second
        assert manager.session.id == "session-b"

    @pytest.mark.asyncio
    async def test_concurrent_connects_leave_one_session(self, manager, transport):
        await asyncio.gather(manager.connect("wc:a"), manager.connect("wc:b"))

        assert manager.is_connected
        assert transport.connect.await_count == 2
        assert transport.disconnect.await_count == 1

    @pytest.mark.asyncio
    async def test_declined_connection(self, manager, transport, approver):
        approver.choose_chain.return_value = None

        result = await manager.connect("wc:a")

        assert result is None
        assert manager.state == SessionState.DISCONNECTED
        transport.reject_proposal.assert_awaited_once()
        transport.approve.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_handshake_failure(self, manager, transport):
        transport.connect.side_effect = ConnectionError("bridge unreachable")

        with pytest.raises(SessionConnectionError):
            await manager.connect("wc:a")

        assert manager.state == SessionState.DISCONNECTED
        assert manager.session is None

    @pytest.mark.asyncio
    async def test_approval_failure(self, manager, transport, state_store):
        transport.approve.side_effect = ConnectionError("dropped")

        with pytest.raises(SessionConnectionError):
            await manager.connect("wc:a")

        assert manager.state == SessionState.DISCONNECTED
        assert state_store.load() is None

    @pytest.mark.asyncio
    async def test_replaced_session_is_not_replayed_after_failed_connect(
        self, manager, transport, approver, state_store, chains, ui
    ):
        await manager.connect("wc:a")
        transport.connect.side_effect = RuntimeError("relay down")

        with pytest.raises(SessionConnectionError):
            await manager.connect("wc:b")

        assert state_store.load() is None
        fresh = make_manager(transport, approver, state_store, chains, ui)
        assert await fresh.reconnect_persisted() is None
        transport.reconnect.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_disconnect_during_chain_prompt(self, manager, transport, approver, state_store):
        prompt_open = asyncio.Event()
        answer = asyncio.Event()

        async def choose_chain(peer, chain_ids):
            prompt_open.set()
            await answer.wait()
            return 1

        approver.choose_chain.side_effect = choose_chain

        pending = asyncio.create_task(manager.connect("wc:a"))
        await prompt_open.wait()

        await asyncio.wait_for(manager.disconnect(), timeout=1)
        assert manager.state == SessionState.DISCONNECTED

        answer.set()
        assert await pending is None
        assert not manager.is_connected
        transport.approve.assert_not_awaited()
        transport.reject_proposal.assert_awaited_once()
        assert state_store.load() is None

    @pytest.mark.asyncio
    async def test_newer_connect_supersedes_pending_prompt(self, manager, transport, approver):
        first_prompt = asyncio.Event()
        answer_first = asyncio.Event()

        async def choose_chain(peer, chain_ids):
            if peer is PEER and not first_prompt.is_set():
                first_prompt.set()
                await answer_first.wait()
            return 1

        approver.choose_chain.side_effect = choose_chain

        pending = asyncio.create_task(manager.connect("wc:a"))
        await first_prompt.wait()

        second = await manager.connect("wc:b")
        answer_first.set()

        assert await pending is None
        assert manager.session is second
        assert second.id == "session-b"
        transport.reject_proposal.assert_awaited_once_with(proposal_for("wc:a"))

    @pytest.mark.asyncio
    async def test_unconfigured_chain_choice(self, manager, approver):
        approver.choose_chain.return_value = 56

        with pytest.raises(SessionConnectionError):
            await manager.connect("wc:a")

        assert manager.state == SessionState.DISCONNECTED


# =============================================================================
# Reconnect and disconnect
# =============================================================================

class TestReconnect:
    @pytest.mark.asyncio
    async def test_reconnect_persisted_session(self, manager, transport, state_store):
        descriptor = SessionDescriptor(session_id="old", uri="wc:z", chain_id=137, account_address=ACCOUNT)
        state_store.save(descriptor)

        session = await manager.reconnect_persisted()

        transport.reconnect.assert_awaited_once_with(descriptor)
        assert session.id == "old"
        assert session.chain_id == 137
        assert manager.state == SessionState.CONNECTED

    @pytest.mark.asyncio
    async def test_reconnect_supersedes_pending_prompt(self, manager, transport, approver, state_store):
        state_store.save(SessionDescriptor(session_id="old", uri="wc:z", chain_id=137, account_address=ACCOUNT))
        prompt_open = asyncio.Event()
        answer = asyncio.Event()

        async def choose_chain(peer, chain_ids):
            prompt_open.set()
            await answer.wait()
            return 1

        approver.choose_chain.side_effect = choose_chain

        pending = asyncio.create_task(manager.connect("wc:a"))
        await prompt_open.wait()
        restored = await manager.reconnect_persisted()

        answer.set()
        assert await pending is None
        assert manager.session is restored
        assert manager.session.id == "old"
        transport.approve.assert_not_awaited()
        transport.reject_proposal.assert_awaited_once_with(proposal_for("wc:a"))

    @pytest.mark.asyncio
    async def test_reconnect_is_attempted_once(self, manager, transport, state_store):
        state_store.save(SessionDescriptor(session_id="old", chain_id=1, account_address=ACCOUNT))
        transport.reconnect.side_effect = ConnectionError("gone")

        assert await manager.reconnect_persisted() is None
        assert await manager.reconnect_persisted() is None
        assert transport.reconnect.await_count == 1

    @pytest.mark.asyncio
    async def test_reconnect_failure_is_ignored(self, manager, transport, state_store):
        state_store.save(SessionDescriptor(session_id="old", chain_id=1, account_address=ACCOUNT))
        transport.reconnect.side_effect = ConnectionError("gone")

        assert await manager.reconnect_persisted() is None
        assert manager.state == SessionState.DISCONNECTED

    @pytest.mark.asyncio
    async def test_nothing_persisted(self, manager, transport):
        assert await manager.reconnect_persisted() is None
        transport.reconnect.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_other_account_is_not_reconnected(self, manager, transport, state_store):
        state_store.save(SessionDescriptor(session_id="old", chain_id=1, account_address="0x" + "9" * 40))

        assert await manager.reconnect_persisted() is None
        transport.reconnect.assert_not_awaited()


class TestDisconnect:
    @pytest.mark.asyncio
    async def test_disconnect(self, manager, transport, state_store):
        await manager.connect("wc:a")

        await manager.disconnect()

        transport.disconnect.assert_awaited_once_with("session-a")
        assert manager.state == SessionState.DISCONNECTED
        assert manager.session is None
        assert state_store.load() is None

    @pytest.mark.asyncio
    async def test_disconnect_is_always_safe(self, manager, transport):
        await manager.disconnect()
        await manager.disconnect()

        transport.disconnect.assert_not_awaited()
        assert manager.state == SessionState.DISCONNECTED

    @pytest.mark.asyncio
    async def test_transport_error_on_disconnect(self, manager, transport):
        await manager.connect("wc:a")
        transport.disconnect.side_effect = ConnectionError("already closed")

        await manager.disconnect()

        assert manager.state == SessionState.DISCONNECTED


# =============================================================================
# Requests
# =============================================================================

class TestHandleRequest:
    @pytest.mark.asyncio
    async def test_not_connected(self, manager, transport):
        outcome = await manager.handle_request(GetTransactionCount(request_id=1, origin=ORIGIN))

        assert isinstance(outcome, Rejection)
        assert outcome.request_id == 1
        transport.fulfill.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_fulfils_through_transport(self, manager, transport):
        await manager.connect("wc:a")

        outcome = await manager.handle_request(GetTransactionCount(request_id=1, origin=ORIGIN))

        assert isinstance(outcome, ResponseEnvelope)
        transport.fulfill.assert_awaited_once_with("session-a", outcome)

    @pytest.mark.asyncio
    async def test_rejects_through_transport(self, transport, approver, state_store, chains, ui):
        manager = make_manager(transport, approver, state_store, chains, ui, AccountCapability.WATCH_ONLY)
        await manager.connect("wc:a")
        action = SignTransaction(request_id=2, origin=ORIGIN, transaction=UnconfirmedTransaction(to=None))

        outcome = await manager.handle_request(action)

        assert outcome.reason == DispatchErrorKind.CAPABILITY_DENIED
        transport.reject.assert_awaited_once_with("session-a", outcome)
        assert manager.is_connected

    @pytest.mark.asyncio
    async def test_delivery_failure_does_not_raise(self, manager, transport):
        await manager.connect("wc:a")
        transport.fulfill.side_effect = ConnectionError("peer gone")

        outcome = await manager.handle_request(GetTransactionCount(request_id=1, origin=ORIGIN))

        assert isinstance(outcome, ResponseEnvelope)
