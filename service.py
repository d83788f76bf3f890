"""
Operations offered to the chat front end: link, unlink, build a timesheet report and
retract the last report posted in a channel.
"""
import logging
from datetime import datetime, tzinfo
from typing import Callable, Optional, Sequence, Union

from config import Settings
from errors import (
    ConfigurationError,
    GatewayError,
    NothingToDeleteError,
    UnlinkedCallerError,
    UserFacingError,
    UserNotFoundError,
)
from ingest.favro import FavroClient
from models import ReportBody
from normalize.models import FavroUser, LastReportRecord
from resolve.cards import CardResolver
from storage.links import Database, LinkStore, ReportRegistry
from timesheet.aggregate import TimesheetAggregator

logger = logging.getLogger(__name__)

FETCH_FAILED_TEXT = 'Could not fetch Favro cards right now. Please try again later.'
LINK_FAILED_TEXT = 'Link failed: Favro could not be reached. Please try again later.'
NO_TOKENS_TEXT = 'Please provide card numbers or IDs, e.g. `BOK-5106 BOK-5120`'
MISSING_FIELD_TEXT = 'Bot is missing FAVRO_TIME_CF_ID. Ask an admin to set it in the environment.'


class TimesheetService:
    def __init__(
        self,
        client: Optional[FavroClient],
        links: LinkStore,
        registry: ReportRegistry,
        resolver: Optional[CardResolver],
        field_id: Optional[str],
        tz: Union[str, tzinfo],
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.client = client
        self.links = links
        self.registry = registry
        self.resolver = resolver
        self.field_id = field_id
        self.tz = tz
        self.clock = clock

    def link_identity(self, caller_id: str, email: str) -> FavroUser:
        try:
            user = self.client.find_user_by_email(email)
        except GatewayError as ex:
            logger.error("Favro user lookup failed: %s %s", ex, ex.diagnostics())
            raise UserFacingError(LINK_FAILED_TEXT) from ex
        if user is None:
            raise UserNotFoundError(email)
        self.links.link(caller_id, user.user_id)
        logger.info("Linked caller %s to Favro user %s", caller_id, user.user_id)
        return user

    def unlink_identity(self, caller_id: str) -> bool:
        was_linked = self.links.unlink(caller_id)
        logger.info("Unlink requested by caller %s (was linked: %s)", caller_id, was_linked)
        return was_linked

    def build_timesheet_report(self, caller_id: str, tokens: Sequence[str]) -> ReportBody:
        """
        Build today's report for the caller's linked Favro user.

        Raises UserFacingError subclasses for anything the caller should be told; a Favro
        failure is logged in full here and surfaces only as a generic message.
        """
        link = self.links.get(caller_id)
        if link is None:
            raise UnlinkedCallerError(caller_id)
        if not self.field_id:
            raise ConfigurationError(MISSING_FIELD_TEXT)
        tokens = [t for t in tokens if t and t.strip()]
        if not tokens:
            raise UserFacingError(NO_TOKENS_TEXT)
        aggregator = TimesheetAggregator(self.resolver, self.field_id, self.tz, clock=self.clock)
        try:
            return aggregator.aggregate(tokens, link.user_id)
        except GatewayError as ex:
            logger.error("Favro fetch failed: %s %s", ex, ex.diagnostics())
            raise UserFacingError(FETCH_FAILED_TEXT) from ex

    def record_report(self, caller_id: str, channel_id: str, message_id: str) -> LastReportRecord:
        return self.registry.record(caller_id, channel_id, message_id)

    def delete_last_report(self, caller_id: str, channel_id: str, delete_message: Optional[Callable[[str], None]] = None) -> str:
        """Retract the caller's last report in channel_id and return its message id."""
        record = self.registry.get(caller_id, channel_id)
        if record is None:
            raise NothingToDeleteError(caller_id, channel_id)
        if delete_message is not None:
            delete_message(record.message_id)
        self.registry.clear(caller_id, channel_id)
        logger.info("Retracted report %s for caller %s in channel %s", record.message_id, caller_id, channel_id)
        return record.message_id


def build_service(
    settings: Settings,
    db: Optional[Database] = None,
    client: Optional[FavroClient] = None,
    remote: bool = True,
) -> TimesheetService:
    """Wire a TimesheetService from settings. db and client may be injected.

    With remote=False no Favro client is built and credentials are not required; only
    unlink_identity, record_report and delete_last_report work on such a service.
    """
    db = db or Database(settings.db_path)
    if client is None and remote:
        settings.require()
        client = FavroClient(
            settings.email,
            settings.token,
            settings.organization_id,
            base_url=settings.base_url,
            timeout=settings.timeout,
        )
    resolver = None
    if client is not None:
        resolver = CardResolver(client, settings.widget_ids, max_pages_per_scope=settings.max_pages_per_widget)
    return TimesheetService(
        client=client,
        links=LinkStore(db),
        registry=ReportRegistry(db),
        resolver=resolver,
        field_id=settings.time_cf_id,
        tz=settings.timezone,
    )
