"""
Conversation Router for Expense Bot

This module ties the components together and defines what each chat
command does:
1. /add        -> entry wizard (multi-turn)
2. /categories -> list category options from the store schema
3. /summary    -> totals for a date range, optionally with detail
4. /help       -> static usage text

DESIGN DECISION: The router is chat-platform agnostic. It takes plain
text in and returns plain text (or a WizardOutcome) out, so the
Telegram binding stays a thin adapter and every flow can be tested
without a bot.

Errors are scoped per command: a store failure becomes a short reply
for that one message, never an exception escaping the handler.
"""

from datetime import datetime
from typing import Callable, Optional

from expense_bot.audit import AuditLogger, create_correlation_id
from expense_bot.config import AppSettings, get_settings
from expense_bot.models.expense import WizardOutcome, WizardState
from expense_bot.queries import SummaryExecutor
from expense_bot.services.storage import ExpenseStoreInterface, NotionExpenseStore
from expense_bot.validation import InputFormatError, parse_summary_args
from expense_bot.wizard import EntryWizard


GENERIC_FAILURE_REPLY = "⚠️ That didn't work, the expense database could not be reached. Please try again later."
NO_CATEGORIES_REPLY = "No categories."
NOTHING_TO_CANCEL_REPLY = "There is no entry in progress."

HELP_TEXT = (
    "Hi! I keep track of your expenses.\n"
    "\n"
    "/add - record an expense step by step\n"
    "/cancel - stop the current entry\n"
    "/categories - list the available categories\n"
    "/summary - totals for this month\n"
    "/summary DD/MM-DD/MM - totals for a date range\n"
    "/summary --detail - add every expense, grouped by category\n"
    "/help - show this message"
)


class ConversationRouter:
    """
    Dispatches chat commands to the wizard or one-shot queries.

    The wizard state for a conversation is owned by the caller and
    passed in on every turn.
    """

    def __init__(
        self,
        storage: ExpenseStoreInterface,
        settings: Optional[AppSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._storage = storage
        self._settings = settings or get_settings().app
        self._audit_logger = audit_logger
        self._clock = clock or (lambda: datetime.now(self._settings.tzinfo))
        self._wizard = EntryWizard(
            storage,
            settings=self._settings,
            audit_logger=audit_logger,
            clock=self._clock,
        )
        self._summary = SummaryExecutor(
            storage,
            settings=self._settings,
            audit_logger=audit_logger,
        )

    def help(self) -> str:
        return HELP_TEXT

    def start_entry(self) -> WizardOutcome:
        """Start (or restart) the entry wizard."""
        return self._wizard.start()

    async def continue_entry(
        self,
        state: WizardState,
        text: Optional[str],
    ) -> WizardOutcome:
        """Feed one message of an ongoing entry to the wizard."""
        return await self._wizard.handle(state, text)

    def cancel_entry(self, state: Optional[WizardState]) -> WizardOutcome:
        """Abandon the ongoing entry, if any."""
        if state is None:
            return WizardOutcome(finished=True, replies=[NOTHING_TO_CANCEL_REPLY])
        return self._wizard.cancel(state)

    async def list_categories(self) -> str:
        """Reply text for /categories."""
        correlation_id = create_correlation_id()
        result = await self._storage.list_category_options()

        if not result.success:
            if self._audit_logger:
                self._audit_logger.log_external_service_error(
                    service="notion",
                    operation="list_category_options",
                    error_message=result.error_message or "unknown error",
                    correlation_id=correlation_id,
                )
            return GENERIC_FAILURE_REPLY

        names = result.value or []
        if self._audit_logger:
            self._audit_logger.log_categories_listed(len(names), correlation_id)
        return ", ".join(names) if names else NO_CATEGORIES_REPLY

    async def summarize(self, args: list[str]) -> str:
        """
        Reply text for /summary.

        A malformed argument gets a format hint and no query is sent.
        """
        correlation_id = create_correlation_id()

        try:
            request = parse_summary_args(args, self._clock())
        except InputFormatError as e:
            if self._audit_logger:
                self._audit_logger.log_summary_rejected(args, str(e), correlation_id)
            return e.hint

        result = await self._summary.execute(request)
        if not result.success:
            if self._audit_logger:
                self._audit_logger.log_external_service_error(
                    service="notion",
                    operation="query_by_date_range",
                    error_message=result.error_message or "unknown error",
                    correlation_id=correlation_id,
                )
            return GENERIC_FAILURE_REPLY

        return self._summary.render(request, result.value)


def create_app_components(
    storage: Optional[ExpenseStoreInterface] = None,
) -> tuple[ConversationRouter, AuditLogger]:
    """
    Factory function to create all application components.

    Args:
        storage: Store to use. Defaults to the Notion store, which
                 requires NOTION_TOKEN and NOTION_DATABASE_ID.

    Returns:
        (router, audit_logger)
    """
    audit_logger = AuditLogger()
    storage = storage or NotionExpenseStore()
    router = ConversationRouter(storage, audit_logger=audit_logger)
    return router, audit_logger
