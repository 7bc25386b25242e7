"""
Telegram Frontend for Expense Bot

This is the chat interface users talk to. It is a thin adapter: every
command is forwarded to the ConversationRouter and its replies are
sent back as plain text messages.

Conversation state:
- The wizard state of each user lives in chat_data, keyed by user id,
  matching the (chat, user) key python-telegram-bot's
  ConversationHandler uses for its own state.
- Nothing is persisted; a restart drops any entry in progress.

Run with:  python -m app.main
"""

import logging
import sys
from typing import Optional

import structlog
from telegram import Update
from telegram.error import TelegramError
from telegram.ext import (
    Application,
    ApplicationBuilder,
    CommandHandler,
    ContextTypes,
    ConversationHandler,
    MessageHandler,
    filters,
)

from expense_bot.audit import AuditLogger
from expense_bot.config import get_settings, validate_all_settings
from expense_bot.models.expense import WizardOutcome, WizardState
from expense_bot.orchestrator import (
    GENERIC_FAILURE_REPLY,
    ConversationRouter,
    create_app_components,
)


ENTERING = 0
ROUTER_KEY = "router"
AUDIT_KEY = "audit_logger"
WIZARDS_KEY = "wizards"

logger = structlog.get_logger("expense_bot.telegram")


def _router(context: ContextTypes.DEFAULT_TYPE) -> ConversationRouter:
    return context.bot_data[ROUTER_KEY]


def _wizards(context: ContextTypes.DEFAULT_TYPE) -> dict[int, WizardState]:
    return context.chat_data.setdefault(WIZARDS_KEY, {})


def _user_key(update: Update) -> int:
    return update.effective_user.id if update.effective_user else 0


async def _send(update: Update, replies: list[str]) -> None:
    for text in replies:
        await update.effective_message.reply_text(text)


async def _apply_outcome(
    update: Update,
    context: ContextTypes.DEFAULT_TYPE,
    outcome: WizardOutcome,
) -> int:
    """Store or drop the wizard state, send replies, pick the next conversation state."""
    wizards = _wizards(context)
    key = _user_key(update)

    if outcome.finished or outcome.state is None:
        wizards.pop(key, None)
    else:
        wizards[key] = outcome.state

    await _send(update, outcome.replies)
    return ConversationHandler.END if outcome.finished else ENTERING


# =============================================================================
# HANDLERS
# =============================================================================

async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await update.effective_message.reply_text(_router(context).help())


async def add_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    return await _apply_outcome(update, context, _router(context).start_entry())


async def entry_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    state = _wizards(context).get(_user_key(update))
    if state is None:
        return ConversationHandler.END

    message = update.effective_message
    text = message.text if message else None
    outcome = await _router(context).continue_entry(state, text)
    return await _apply_outcome(update, context, outcome)


async def cancel_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    state = _wizards(context).get(_user_key(update))
    return await _apply_outcome(update, context, _router(context).cancel_entry(state))


async def categories_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    reply = await _router(context).list_categories()
    await update.effective_message.reply_text(reply)


async def summary_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    reply = await _router(context).summarize(list(context.args or []))
    await update.effective_message.reply_text(reply)


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Last line of defence: log and tell the user, never crash the bot."""
    logger.error("handler_failed", error=str(context.error), exc_info=context.error)

    audit_logger: Optional[AuditLogger] = context.bot_data.get(AUDIT_KEY)
    if audit_logger:
        audit_logger.log_error(
            error_type=type(context.error).__name__,
            error_message=str(context.error),
            details={"handler": "telegram"},
        )

    if isinstance(update, Update) and update.effective_message:
        try:
            await update.effective_message.reply_text(GENERIC_FAILURE_REPLY)
        except TelegramError as e:
            logger.warning("error_reply_failed", error=str(e))


# =============================================================================
# APPLICATION
# =============================================================================

def build_application(
    router: Optional[ConversationRouter] = None,
    token: Optional[str] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> Application:
    """
    Build the Telegram application with all handlers registered.

    Args:
        router: Router to use; created from settings if omitted
        token: Bot token; read from TELEGRAM_BOT_TOKEN if omitted
        audit_logger: Receives handler crashes as system errors
    """
    token = token or get_settings().telegram.bot_token
    if router is None:
        router, audit_logger = create_app_components()

    app = ApplicationBuilder().token(token).build()
    app.bot_data[ROUTER_KEY] = router
    app.bot_data[AUDIT_KEY] = audit_logger

    entry = ConversationHandler(
        entry_points=[CommandHandler("add", add_command)],
        states={
            ENTERING: [
                MessageHandler(filters.UpdateType.MESSAGE & ~filters.COMMAND, entry_message),
            ],
        },
        fallbacks=[CommandHandler("cancel", cancel_command)],
        allow_reentry=True,
    )

    app.add_handler(entry)
    app.add_handler(CommandHandler(["start", "help"], help_command))
    app.add_handler(CommandHandler("categories", categories_command))
    app.add_handler(CommandHandler("summary", summary_command))
    app.add_handler(CommandHandler("cancel", cancel_command))
    app.add_error_handler(error_handler)
    return app


def main() -> None:
    """Check configuration, then poll until interrupted."""
    status = validate_all_settings()
    missing = [name for name in ("telegram", "notion", "app") if not status.get(name)]
    if missing:
        for name in missing:
            print(f"Configuration error ({name}): {status.get(f'{name}_error')}", file=sys.stderr)
        sys.exit(1)

    logging.basicConfig(
        level=get_settings().app.log_level.upper(),
        format="%(message)s",
    )

    app = build_application()
    logger.info("bot_starting")
    app.run_polling(allowed_updates=Update.ALL_TYPES)


if __name__ == "__main__":
    main()
