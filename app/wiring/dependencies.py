from functools import lru_cache
import logging
from zoneinfo import ZoneInfo

from app.core.config import settings
from app.application.ports.booking_extractor import BookingExtractorPort
from app.application.ports.crm import CrmSyncPort
from app.application.ports.message_platform import MessagePlatformPort
from app.application.use_cases.analytics import AnalyticsDashboardUseCase
from app.application.use_cases.availability import AvailabilityEngine
from app.application.use_cases.booking import BookingUseCase
from app.application.use_cases.dispatch_message import ConversationDispatcher
from app.application.use_cases.handle_incoming_message import HandleIncomingMessageUseCase
from app.application.use_cases.send_reply import SendReplyUseCase
from app.application.use_cases.sweep_conversations import ConversationSweeper
from app.application.utils.booking_extraction import KeywordBookingExtractor
from app.infrastructure.analytics.memory_tracker import InMemoryAnalytics
from app.infrastructure.cache.availability_cache import AvailabilityCache
from app.infrastructure.crm.hubspot_client import HubSpotCrm
from app.infrastructure.crm.mock_crm import MockCrm
from app.infrastructure.knowledge.catalog_store import StaticCatalog
from app.infrastructure.llm.openai_extractor import OpenAIBookingExtractor
from app.infrastructure.locks.slot_lock_manager import SlotLockManager
from app.infrastructure.store.memory_booking_store import MemoryBookingStore
from app.infrastructure.store.memory_store import MemoryConversationStore
from app.infrastructure.whatsapp.whatsapp_client import WhatsAppClient
from app.infrastructure.whatsapp.whatsapp_platform import MockWhatsAppPlatform, WhatsAppPlatform


logger = logging.getLogger(__name__)


def _is_dev() -> bool:
    return settings.ENV.lower() in {"dev", "local", "test"}


@lru_cache
def get_timezone() -> ZoneInfo:
    return ZoneInfo(settings.BUSINESS_TIMEZONE)


@lru_cache
def get_catalog() -> StaticCatalog:
    return StaticCatalog()


@lru_cache
def get_booking_store() -> MemoryBookingStore:
    return MemoryBookingStore()


@lru_cache
def get_conversation_store() -> MemoryConversationStore:
    return MemoryConversationStore(history_limit=settings.HISTORY_LIMIT)


@lru_cache
def get_analytics() -> InMemoryAnalytics:
    return InMemoryAnalytics()


@lru_cache
def get_availability_engine() -> AvailabilityEngine:
    return AvailabilityEngine(
        catalog=get_catalog(),
        store=get_booking_store(),
        cache=AvailabilityCache(),
        slot_step_minutes=settings.SLOT_STEP_MINUTES,
        buffer_minutes=settings.BOOKING_BUFFER_MINUTES,
    )


@lru_cache
def get_crm() -> CrmSyncPort:
    if settings.HUBSPOT_ACCESS_TOKEN and not _is_dev():
        return HubSpotCrm()
    logger.info("Using MockCrm (token missing or ENV=dev/local)")
    return MockCrm()


@lru_cache
def get_booking_use_case() -> BookingUseCase:
    return BookingUseCase(
        store=get_booking_store(),
        availability=get_availability_engine(),
        locks=SlotLockManager(),
        timezone=get_timezone(),
        crm=get_crm(),
        currency=settings.CURRENCY_SYMBOL,
        analytics=get_analytics(),
    )


@lru_cache
def get_booking_extractor() -> BookingExtractorPort:
    keyword = KeywordBookingExtractor(get_catalog())
    if settings.OPENAI_API_KEY and settings.OPENAI_API_KEY.strip():
        return OpenAIBookingExtractor(catalog=get_catalog(), fallback=keyword)
    return keyword


@lru_cache
def get_message_platform() -> MessagePlatformPort:
    if not (settings.WHATSAPP_ACCESS_TOKEN and settings.WHATSAPP_PHONE_NUMBER_ID):
        if _is_dev():
            logger.info("Using MockWhatsAppPlatform (credentials missing, ENV=dev/local)")
            return MockWhatsAppPlatform()
        raise ValueError("WHATSAPP_ACCESS_TOKEN and WHATSAPP_PHONE_NUMBER_ID are required to send replies.")

    logger.info("Using real WhatsAppPlatform")
    client = WhatsAppClient(
        access_token=settings.WHATSAPP_ACCESS_TOKEN,
        phone_number_id=settings.WHATSAPP_PHONE_NUMBER_ID,
        graph_api_version=settings.WHATSAPP_GRAPH_API_VERSION,
    )
    return WhatsAppPlatform(client=client)


def _build_handler(send_reply: SendReplyUseCase | None) -> HandleIncomingMessageUseCase:
    return HandleIncomingMessageUseCase(
        store=get_conversation_store(),
        dispatcher=ConversationDispatcher(get_booking_extractor()),
        bookings=get_booking_use_case(),
        availability=get_availability_engine(),
        catalog=get_catalog(),
        timezone=get_timezone(),
        business_name=settings.BUSINESS_NAME,
        crm=get_crm(),
        send_reply=send_reply,
        currency=settings.CURRENCY_SYMBOL,
        analytics=get_analytics(),
    )


@lru_cache
def get_handle_incoming_message_use_case() -> HandleIncomingMessageUseCase:
    send_reply = SendReplyUseCase(platform=get_message_platform(), auto_reply_enabled=settings.AUTO_REPLY_ENABLED)
    return _build_handler(send_reply)


@lru_cache
def get_test_message_use_case() -> HandleIncomingMessageUseCase:
    """Same pipeline without outbound delivery; the reply is returned to the caller."""
    return _build_handler(send_reply=None)


@lru_cache
def get_conversation_sweeper() -> ConversationSweeper:
    return ConversationSweeper(
        store=get_conversation_store(),
        retention_seconds=settings.CONVERSATION_RETENTION_HOURS * 3600,
    )


@lru_cache
def get_analytics_use_case() -> AnalyticsDashboardUseCase:
    return AnalyticsDashboardUseCase(tracker=get_analytics(), timezone=get_timezone())
