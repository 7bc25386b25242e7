"""Expense entry wizard package."""

from expense_bot.wizard.entry_wizard import (
    AMOUNT_PROMPT,
    CANCELLED_REPLY,
    CATEGORY_EMPTY_PROMPT,
    CATEGORY_FREE_TEXT_PROMPT,
    CATEGORY_PROMPT,
    CATEGORY_UNAVAILABLE_NOTE,
    DATE_PROMPT,
    SAVE_FAILED_REPLY,
    TITLE_EMPTY_PROMPT,
    TITLE_PROMPT,
    EntryWizard,
)

__all__ = [
    "AMOUNT_PROMPT",
    "CANCELLED_REPLY",
    "CATEGORY_EMPTY_PROMPT",
    "CATEGORY_FREE_TEXT_PROMPT",
    "CATEGORY_PROMPT",
    "CATEGORY_UNAVAILABLE_NOTE",
    "DATE_PROMPT",
    "SAVE_FAILED_REPLY",
    "TITLE_EMPTY_PROMPT",
    "TITLE_PROMPT",
    "EntryWizard",
]
