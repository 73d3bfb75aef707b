"""
alerts.py - New message alerts
Single responsibility: sound and show an alert for a new user message.
"""
import logging
import sys
import threading

import flet as ft

from support_console.config import COLOR_PRIMARY

logger = logging.getLogger(__name__)

BEEP_FREQUENCY_HZ = 800
BEEP_DURATION_MS = 300


def play_notification_sound() -> None:
    """短いビープ音を鳴らす。Windows 以外ではログのみ。"""
    if sys.platform != "win32":
        logger.info("Notification sound is only supported on Windows; skipping")
        return

    def _beep():
        try:
            import winsound

            winsound.Beep(BEEP_FREQUENCY_HZ, BEEP_DURATION_MS)
        except Exception:
            logger.warning("Failed to play notification sound", exc_info=True)

    # Beep blocks for its duration; keep it off the UI loop
    threading.Thread(target=_beep, daemon=True).start()


def show_notice(page: ft.Page, message: str, bgcolor: str = COLOR_PRIMARY) -> None:
    snack = ft.SnackBar(ft.Text(message, color="white"), bgcolor=bgcolor)
    page.overlay.append(snack)
    snack.open = True
    page.update()


def make_alert_handler(page: ft.Page):
    """Build the on_alert sink handed to the sync session."""

    def on_alert(ticket) -> None:
        play_notification_sound()
        try:
            show_notice(page, f"新しいメッセージ: #{ticket.id} {ticket.subject}")
        except Exception:
            logger.debug("Failed to show alert notice", exc_info=True)

    return on_alert
