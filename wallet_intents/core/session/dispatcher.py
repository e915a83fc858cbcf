"""
Session Request Dispatcher

Routes each inbound RPC action of one session to its handler:

    capability gate -> handler (may wait on the user or the network) -> outcome

Every action produces exactly one outcome, a ResponseEnvelope or a
Rejection, carrying the action's request id and origin unchanged. Errors
never escape to the session: cancellations become silent rejections,
signing and broadcast failures are shown through the UI error channel
first. Requests may finish out of order.
"""

from __future__ import annotations

import itertools
from typing import Dict, Optional

import structlog
from eth_utils import add_0x_prefix, encode_hex

from ...config import DEFAULT_TRANSACTION_COUNT
from .errors import (
    DispatchError,
    DispatchErrorKind,
    UserCancelledError,
)
from .models import (
    ConfirmType,
    DispatchOutcome,
    GetTransactionCount,
    MessageKind,
    Rejection,
    ResponseEnvelope,
    ResponseKind,
    RpcAction,
    SendRawTransaction,
    SendTransaction,
    SentTransaction,
    Session,
    SignableMessage,
    SignedTransaction,
    SignMessage,
    SignPersonalMessage,
    SignTransaction,
    SignTypedMessage,
    UnknownAction,
)
from .protocol import ConfirmationUI, TransactionBroadcaster

logger = structlog.stdlib.get_logger(__name__)

_MESSAGE_RESPONSE_KINDS = {
    MessageKind.MESSAGE: ResponseKind.SIGNED_MESSAGE,
    MessageKind.PERSONAL_MESSAGE: ResponseKind.SIGNED_PERSONAL_MESSAGE,
    MessageKind.TYPED_DATA: ResponseKind.SIGNED_TYPED_MESSAGE,
}


def _hex(value) -> str:
    if isinstance(value, (bytes, bytearray)):
        return encode_hex(value)
    return add_0x_prefix(str(value))


class SessionRequestDispatcher:
    """Dispatches RPC actions for a single session."""

    def __init__(
        self,
        session: Session,
        ui: ConfirmationUI,
        broadcaster: TransactionBroadcaster,
        *,
        transaction_count_placeholder: str = DEFAULT_TRANSACTION_COUNT,
    ):
        self.session = session
        self._ui = ui
        self._broadcaster = broadcaster
        # Stand-in for eth_getTransactionCount; no chain query is made
        self._transaction_count_placeholder = transaction_count_placeholder
        # Keyed per dispatch call; peers may reuse request ids
        self._tokens = itertools.count()
        self._in_flight: Dict[int, RpcAction] = {}

    @property
    def in_flight_count(self) -> int:
        return len(self._in_flight)

    def is_in_flight(self, action: RpcAction) -> bool:
        return any(pending is action for pending in self._in_flight.values())

    async def dispatch(self, action: RpcAction) -> DispatchOutcome:
        with structlog.contextvars.bound_contextvars(
            session_id=self.session.id,
            request_id=str(action.request_id),
            rpc_method=action.method or type(action).__name__,
        ):
            if self.session.is_watch_only:
                logger.info("capability_denied", account=self.session.account.address)
                return self._rejection(action, DispatchErrorKind.CAPABILITY_DENIED)

            if isinstance(action, UnknownAction):
                logger.info("unsupported_action", requested_method=action.requested_method)
                return self._rejection(action, DispatchErrorKind.UNSUPPORTED_ACTION)

            if isinstance(action, GetTransactionCount):
                return self._envelope(action, ResponseKind.TRANSACTION_COUNT, self._transaction_count_placeholder)

            token = next(self._tokens)
            self._in_flight[token] = action
            try:
                return await self._handle(action)
            except DispatchError as exc:
                return self._rejection(action, exc.kind, exc.message)
            except Exception as exc:
                logger.error("dispatch_failed", error=str(exc), exc_info=True)
                return self._rejection(action, DispatchErrorKind.SIGNING_FAILED, str(exc))
            finally:
                self._in_flight.pop(token, None)

    async def _handle(self, action: RpcAction) -> ResponseEnvelope:
        if isinstance(action, SignTransaction):
            return await self._execute_transaction(action, action.transaction, ConfirmType.SIGN)
        elif isinstance(action, SendTransaction):
            return await self._execute_transaction(action, action.transaction, ConfirmType.SIGN_THEN_SEND)
        elif isinstance(action, (SignMessage, SignPersonalMessage, SignTypedMessage)):
            return await self._sign_message(action)
        elif isinstance(action, SendRawTransaction):
            return await self._send_raw_transaction(action)
        raise DispatchError(DispatchErrorKind.UNSUPPORTED_ACTION, f"No handler for {type(action).__name__}")

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    async def _execute_transaction(self, action: RpcAction, transaction, confirm_type: ConfirmType) -> ResponseEnvelope:
        failure_kind = (
            DispatchErrorKind.BROADCAST_FAILED
            if confirm_type == ConfirmType.SIGN_THEN_SEND
            else DispatchErrorKind.SIGNING_FAILED
        )

        try:
            result = await self._ui.confirm_transaction(self.session, transaction, confirm_type)
        except UserCancelledError:
            raise self._cancelled()
        except Exception as exc:
            raise await self._surface(failure_kind, exc)

        if confirm_type == ConfirmType.SIGN and isinstance(result, SignedTransaction):
            return self._envelope(action, ResponseKind.SIGNED_TRANSACTION, _hex(result.data))

        if confirm_type == ConfirmType.SIGN_THEN_SEND and isinstance(result, SentTransaction):
            try:
                await self._ui.show_transaction_in_progress()
            except Exception as exc:
                logger.warning("in_progress_display_failed", error=str(exc))
            return self._envelope(action, ResponseKind.SENT_TRANSACTION, _hex(result.transaction_id))

        raise await self._surface(
            failure_kind,
            TypeError(f"Unexpected confirmation result {type(result).__name__} for {confirm_type.value}"),
        )

    async def _sign_message(self, action: RpcAction) -> ResponseEnvelope:
        message = SignableMessage.from_action(action)
        try:
            signature = await self._ui.sign_message(self.session, message)
        except UserCancelledError:
            raise self._cancelled()
        except Exception as exc:
            raise await self._surface(DispatchErrorKind.SIGNING_FAILED, exc)

        return self._envelope(action, _MESSAGE_RESPONSE_KINDS[message.kind], _hex(signature))

    async def _send_raw_transaction(self, action: SendRawTransaction) -> ResponseEnvelope:
        try:
            approved = await self._ui.approve_raw_transaction(action.raw_transaction)
        except UserCancelledError:
            approved = False
        if not approved:
            raise self._cancelled()

        try:
            transaction_id = await self._broadcaster.send_raw_transaction(self.session, action.raw_transaction)
        except Exception as exc:
            raise await self._surface(DispatchErrorKind.BROADCAST_FAILED, exc)

        try:
            await self._ui.show_success_feedback()
        except Exception as exc:
            logger.warning("success_feedback_failed", error=str(exc))
        return self._envelope(action, ResponseKind.SENT_TRANSACTION, _hex(transaction_id))

    # ------------------------------------------------------------------
    # Outcomes
    # ------------------------------------------------------------------

    def _cancelled(self) -> DispatchError:
        logger.debug("user_cancelled")
        return DispatchError(DispatchErrorKind.USER_CANCELLED)

    async def _surface(self, kind: DispatchErrorKind, exc: Exception) -> DispatchError:
        logger.warning(kind.value, error=str(exc))
        try:
            await self._ui.display_error(exc)
        except Exception as display_exc:
            logger.warning("error_display_failed", error=str(display_exc))
        return DispatchError(kind, str(exc), cause=exc)

    @staticmethod
    def _envelope(action: RpcAction, kind: ResponseKind, value: str) -> ResponseEnvelope:
        return ResponseEnvelope(request_id=action.request_id, origin=action.origin, kind=kind, value=value)

    @staticmethod
    def _rejection(action: RpcAction, kind: DispatchErrorKind, detail: Optional[str] = None) -> Rejection:
        return Rejection(request_id=action.request_id, origin=action.origin, reason=kind, detail=detail)


__all__ = ["SessionRequestDispatcher"]
