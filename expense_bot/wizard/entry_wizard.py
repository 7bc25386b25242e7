"""
Expense Entry Wizard

Guides the user through entering one expense, one field per message:

    INIT -> AWAIT_TITLE -> AWAIT_DATE -> AWAIT_CATEGORY -> AWAIT_AMOUNT -> done

DESIGN DECISION: The wizard holds no state of its own. Each turn takes
a WizardState and returns a WizardOutcome carrying the next state, so
the chat layer decides where conversation state lives and one wizard
instance can serve every conversation.

Invalid input never advances: the user is re-prompted and the draft is
left untouched. Nothing is written to the store until the amount step
succeeds with a complete draft.
"""

from datetime import datetime, timezone
from typing import Callable, Optional

from expense_bot.audit import AuditLogger
from expense_bot.config import AppSettings, get_settings
from expense_bot.formatting import format_amount
from expense_bot.models.expense import (
    ExpenseDraft,
    StoreResult,
    WizardOutcome,
    WizardState,
    WizardStep,
)
from expense_bot.services.storage import ExpenseStoreInterface
from expense_bot.validation import InputFormatError, parse_amount, parse_entry_date


TITLE_PROMPT = "Enter the expense title:"
TITLE_EMPTY_PROMPT = "The title cannot be empty. Enter the expense title:"
DATE_PROMPT = "Date?\n• Type now for the current time\n• Or DD/MM HH:mm (e.g. 25/12 19:30)"
CATEGORY_PROMPT = "Choose a category (type it exactly):"
CATEGORY_FREE_TEXT_PROMPT = "Type a category:"
CATEGORY_UNAVAILABLE_NOTE = "(Could not load the category list.)"
CATEGORY_EMPTY_PROMPT = "The category cannot be empty. Type a category:"
AMOUNT_PROMPT = "Amount (numbers only, e.g. 20000):"
SAVE_FAILED_REPLY = "⚠️ Could not save the expense. Send the amount again to retry, or /cancel."
CANCELLED_REPLY = "Entry cancelled. Nothing was saved."


class EntryWizard:
    """
    The guided expense entry flow.

    Flow:
    1. start() -> prompt for the title
    2. Title  -> any non-empty text
    3. Date   -> "now" or DD/MM HH:mm; shows category options next
    4. Category -> any non-empty text, not checked against the options
    5. Amount -> digits only; saves the expense and finishes
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

    def start(self) -> WizardOutcome:
        """Begin a new entry with an empty draft."""
        state = WizardState()
        if self._audit_logger:
            self._audit_logger.log_wizard_started(state.correlation_id)
        return self._on_init(state)

    async def handle(self, state: WizardState, text: Optional[str]) -> WizardOutcome:
        """
        Feed one user message to the wizard.

        Args:
            state: The state returned by the previous turn
            text: The message text, or None for non-text messages
                (photos, stickers...), which are ignored

        Returns:
            The outcome of the turn. The given state is never modified.
        """
        if text is None:
            return WizardOutcome(state=state)

        state = state.model_copy(deep=True)

        if state.step == WizardStep.INIT:
            return self._on_init(state)
        if state.step == WizardStep.AWAIT_TITLE:
            return self._on_title(state, text)
        if state.step == WizardStep.AWAIT_DATE:
            return await self._on_date(state, text)
        if state.step == WizardStep.AWAIT_CATEGORY:
            return self._on_category(state, text)
        return await self._on_amount(state, text)

    def cancel(self, state: WizardState) -> WizardOutcome:
        """Drop the draft and finish without saving."""
        if self._audit_logger:
            self._audit_logger.log_wizard_cancelled(state.step.value, state.correlation_id)
        return WizardOutcome(finished=True, replies=[CANCELLED_REPLY])

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------

    def _on_init(self, state: WizardState) -> WizardOutcome:
        state.draft = ExpenseDraft()
        state.step = WizardStep.AWAIT_TITLE
        return WizardOutcome(state=state, replies=[TITLE_PROMPT])

    def _on_title(self, state: WizardState, text: str) -> WizardOutcome:
        title = text.strip()
        if not title:
            self._rejected(state, "empty title")
            return WizardOutcome(state=state, replies=[TITLE_EMPTY_PROMPT])

        state.draft.title = title
        state.step = WizardStep.AWAIT_DATE
        return WizardOutcome(state=state, replies=[DATE_PROMPT])

    async def _on_date(self, state: WizardState, text: str) -> WizardOutcome:
        try:
            moment = parse_entry_date(text, self._clock())
        except InputFormatError as e:
            self._rejected(state, str(e))
            return WizardOutcome(state=state, replies=[e.hint])

        state.draft.date = moment.astimezone(timezone.utc)
        state.step = WizardStep.AWAIT_CATEGORY

        options = await self._storage.list_category_options()
        return WizardOutcome(state=state, replies=[self._category_prompt(state, options)])

    def _on_category(self, state: WizardState, text: str) -> WizardOutcome:
        category = text.strip()
        if not category:
            self._rejected(state, "empty category")
            return WizardOutcome(state=state, replies=[CATEGORY_EMPTY_PROMPT])

        state.draft.category = category
        state.step = WizardStep.AWAIT_AMOUNT
        return WizardOutcome(state=state, replies=[AMOUNT_PROMPT])

    async def _on_amount(self, state: WizardState, text: str) -> WizardOutcome:
        try:
            amount = parse_amount(text)
        except InputFormatError as e:
            self._rejected(state, str(e))
            return WizardOutcome(state=state, replies=[e.hint])

        draft = state.draft
        draft.amount = amount

        if not draft.is_complete:
            # Only reachable if the state was built by hand; nothing to save
            if self._audit_logger:
                missing = [
                    name for name in ("title", "date", "category")
                    if not getattr(draft, name)
                ]
                self._audit_logger.log_wizard_abandoned(missing, state.correlation_id)
            return WizardOutcome(finished=True)

        record = draft.to_record()
        result = await self._storage.create_record(record)

        if not result.success:
            if self._audit_logger:
                self._audit_logger.log_save_failed(
                    record.title,
                    result.error_message or "unknown error",
                    state.correlation_id,
                )
            return WizardOutcome(state=state, replies=[SAVE_FAILED_REPLY])

        if self._audit_logger:
            self._audit_logger.log_expense_saved(
                title=record.title,
                amount=record.amount,
                category=record.category,
                correlation_id=state.correlation_id,
            )

        return WizardOutcome(
            finished=True,
            replies=[f"✅ Saved! {record.title} - {format_amount(record.amount, self._settings)}"],
            record=record,
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _category_prompt(self, state: WizardState, options: StoreResult) -> str:
        if not options.success:
            if self._audit_logger:
                self._audit_logger.log_external_service_error(
                    service="notion",
                    operation="list_category_options",
                    error_message=options.error_message or "unknown error",
                    correlation_id=state.correlation_id,
                )
            return f"{CATEGORY_UNAVAILABLE_NOTE}\n{CATEGORY_FREE_TEXT_PROMPT}"

        if not options.value:
            return CATEGORY_FREE_TEXT_PROMPT

        bullets = "\n".join(f"• {name}" for name in options.value)
        return f"{CATEGORY_PROMPT}\n{bullets}"

    def _rejected(self, state: WizardState, reason: str) -> None:
        if self._audit_logger:
            self._audit_logger.log_wizard_input_rejected(
                step=state.step.value,
                reason=reason,
                correlation_id=state.correlation_id,
            )
