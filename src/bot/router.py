"""Bot router composition (one catch-all handler, commands are dispatched inside it)."""

from __future__ import annotations

from aiogram import Router

from src.bot.handlers import handle_message

router = Router(name="paypilot")
router.message.register(handle_message)
