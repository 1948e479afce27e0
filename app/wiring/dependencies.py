from functools import lru_cache
import logging
from pathlib import Path
from zoneinfo import ZoneInfo

from app.core.config import settings
from app.application.ports.booking_writer import BookingWriterPort
from app.application.ports.catalog import CatalogPort
from app.application.ports.message_platform import MessagePlatformPort
from app.application.ports.session_store import SessionStorePort
from app.application.use_cases.conversation_engine import ConversationEngine
from app.application.use_cases.handle_incoming_message import HandleIncomingMessageUseCase
from app.application.use_cases.send_reply import SendReplyUseCase
from app.infrastructure.bookings.json_booking_writer import JsonBookingWriter
from app.infrastructure.catalog.catalog_store import CatalogStore, load_catalog
from app.infrastructure.store.json_store import JsonSessionStore
from app.infrastructure.store.memory_store import MemorySessionStore
from app.infrastructure.whatsapp.mock_platform import MockWhatsAppPlatform
from app.infrastructure.whatsapp.whatsapp_client import WhatsAppClient
from app.infrastructure.whatsapp.whatsapp_platform import WhatsAppPlatform


def _is_local() -> bool:
    return settings.ENV.lower() in {"dev", "local"}


@lru_cache
def get_session_store() -> SessionStorePort:
    if _is_local():
        return JsonSessionStore(data_dir=str(Path(settings.DATA_DIR) / "sessions"))
    return MemorySessionStore()


@lru_cache
def get_catalog() -> CatalogPort:
    if settings.CATALOG_PATH:
        return CatalogStore(load_catalog(settings.CATALOG_PATH))
    return CatalogStore()


@lru_cache
def get_booking_writer() -> BookingWriterPort:
    return JsonBookingWriter(data_dir=settings.DATA_DIR)


@lru_cache
def get_conversation_engine() -> ConversationEngine:
    return ConversationEngine(
        catalog=get_catalog(),
        booking_writer=get_booking_writer(),
        timezone=ZoneInfo(settings.BOOKING_TIMEZONE),
        list_limit=settings.CATALOG_LIST_LIMIT,
        timeout_seconds=settings.COLLABORATOR_TIMEOUT_SECONDS,
    )


@lru_cache
def get_whatsapp_platform() -> MessagePlatformPort:
    logger = logging.getLogger(__name__)
    logger.info(
        "META_WA_ACCESS_TOKEN present=%s len=%s",
        bool(settings.META_WA_ACCESS_TOKEN),
        len(settings.META_WA_ACCESS_TOKEN or ""),
    )
    logger.info("ENV=%s", settings.ENV)

    if not settings.META_WA_ACCESS_TOKEN or not settings.META_WA_PHONE_NUMBER_ID:
        if _is_local():
            logger.info("Using MockWhatsAppPlatform (token or phone number id missing, ENV=dev/local)")
            return MockWhatsAppPlatform()
        raise ValueError("META_WA_ACCESS_TOKEN and META_WA_PHONE_NUMBER_ID are required to send WhatsApp replies.")

    logger.info("Using real WhatsAppPlatform")
    client = WhatsAppClient(
        access_token=settings.META_WA_ACCESS_TOKEN,
        phone_number_id=settings.META_WA_PHONE_NUMBER_ID,
        api_version=settings.META_WA_API_VERSION,
        timeout_seconds=settings.WHATSAPP_TIMEOUT_SECONDS,
        max_retries=settings.WHATSAPP_SEND_RETRIES,
    )
    return WhatsAppPlatform(client=client)


@lru_cache
def get_handle_incoming_message_use_case() -> HandleIncomingMessageUseCase:
    # Cached so every request shares the same per-sender locks
    return HandleIncomingMessageUseCase(
        store=get_session_store(),
        engine=get_conversation_engine(),
        send_reply=SendReplyUseCase(
            platform=get_whatsapp_platform(),
            auto_reply_enabled=settings.AUTO_REPLY_ENABLED,
        ),
    )


def get_container() -> dict[str, object]:
    return {
        "use_case": get_handle_incoming_message_use_case(),
        "store": get_session_store(),
        "booking_writer": get_booking_writer(),
    }
