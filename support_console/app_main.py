"""
app_main.py - Support Console メインアプリケーション
Support Console v1.0
"""

import logging
import sys
from pathlib import Path

import flet as ft

from support_console.config import ADMIN_NAME, APP_TITLE, COLOR_BG, COLOR_PRIMARY
from support_console.database.schema import initialize_schema
from support_console.services import filter_service
from support_console.services.ticket_service import SQLiteTicketBackend
from support_console.sync.session import SyncSession
from support_console.ui import views
from support_console.ui.alerts import make_alert_handler

logger = logging.getLogger(__name__)


def resource_path(relative_path: str) -> str:
    """Get absolute path to resource, works for dev and for PyInstaller"""
    if hasattr(sys, "_MEIPASS"):
        return str(Path(sys._MEIPASS) / relative_path)
    return str(Path.cwd() / relative_path)


# ==========================================================================
# メインアプリ
# ==========================================================================


async def main(page: ft.Page):
    page.title = APP_TITLE
    page.window.icon = resource_path("app.ico")
    page.window.maximized = True
    page.theme_mode = ft.ThemeMode.LIGHT
    page.bgcolor = COLOR_BG
    page.padding = 0
    page.theme = ft.Theme(
        color_scheme_seed=COLOR_PRIMARY,
        font_family="Roboto",
    )

    try:
        initialize_schema()
        initial_filter = filter_service.load_last(ADMIN_NAME)
    except Exception as exc:
        logger.exception("Failed to initialize database schema")
        page.overlay.append(
            ft.AlertDialog(
                title=ft.Text("データベース初期化エラー"),
                content=ft.Text(f"データベースの初期化に失敗しました。\n詳細: {exc}"),
                open=True,
            )
        )
        page.update()
        return

    # 1 画面につき 1 セッション（ポーリング 2 本を保持）
    session = SyncSession(
        SQLiteTicketBackend(),
        admin_name=ADMIN_NAME,
        on_alert=make_alert_handler(page),
        initial_filter=initial_filter,
        on_filter_change=lambda f: filter_service.save_last(ADMIN_NAME, f),
    )

    async def on_window_event(e: ft.WindowEvent):
        if e.type == ft.WindowEventType.CLOSE:
            logger.debug("Window close event")
            try:
                session.stop()
            except Exception:
                logger.warning("Failed to stop sync session on window close", exc_info=True)
            page.window.prevent_close = False
            await page.window.close()

    def on_disconnect(_e):
        session.stop()

    page.window.prevent_close = True
    page.window.on_event = on_window_event
    page.on_disconnect = on_disconnect

    page.views.clear()
    page.views.append(views.build_console_view(page, session, ADMIN_NAME))
    page.update()

    session.start()
