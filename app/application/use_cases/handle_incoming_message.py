from __future__ import annotations

import logging
from datetime import datetime

from app.application.ports.session_store import SessionStorePort
from app.application.use_cases.conversation_engine import ConversationEngine
from app.application.use_cases.send_reply import SendReplyUseCase
from app.application.utils.keyed_lock import KeyedLock
from app.domain.entities.conversation_state import ConversationState
from app.domain.entities.message import Message
from app.domain.entities.reply import EngineResult


class HandleIncomingMessageUseCase:
    def __init__(
        self,
        store: SessionStorePort,
        engine: ConversationEngine,
        send_reply: SendReplyUseCase,
        locks: KeyedLock | None = None,
    ) -> None:
        self._store = store
        self._engine = engine
        self._send_reply = send_reply
        self._locks = locks or KeyedLock()
        self._logger = logging.getLogger(__name__)

    def handle(self, message: Message, now: datetime | None = None) -> EngineResult | None:
        """
        Run one inbound message through the conversation and deliver the reply.

        Messages from the same sender are processed one at a time: read state,
        run the engine, persist state. Returns the reply, or None when the
        message was a duplicate or could not be processed.
        """
        identifier = message.sender_id
        try:
            with self._locks.hold(identifier):
                if self._store.has_processed(identifier, message.id):
                    self._logger.info("Duplicate message ignored", extra={"message_id": message.id})
                    return None

                self._store.append_message(
                    identifier,
                    sender="customer",
                    text=message.text,
                    meta={"message_id": message.id, "platform": message.platform},
                )

                state = self._store.get(identifier) or ConversationState(identifier=identifier)
                turn = self._engine.process(state, message.text, now=now)
                self._store.put(identifier, turn.state)
                # Marked only once the new state is stored
                self._store.mark_processed(identifier, message.id)

                self._store.append_message(
                    identifier,
                    sender="bot",
                    text=turn.result.reply_text,
                    meta={"phase": str(turn.state.phase), "booking_id": turn.booking_id},
                )
        except Exception as e:
            self._logger.exception(
                "Error processing message",
                extra={"message_id": message.id, "identifier": identifier, "error": str(e)},
            )
            return None

        try:
            did_send = self._send_reply.execute(recipient_id=identifier, result=turn.result)
            if did_send:
                self._logger.info("Reply sent", extra={"message_id": message.id, "identifier": identifier})
        except Exception as e:
            self._logger.exception(
                "Error sending reply",
                extra={"message_id": message.id, "identifier": identifier, "error": str(e)},
            )

        return turn.result
