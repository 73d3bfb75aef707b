"""
views.py - UI view builders
Single responsibility: build the ticket console View and keep it rendered
from the sync session.
"""

import asyncio
import logging

import flet as ft

from support_console.config import (
    APP_TITLE,
    BORDER_RADIUS_BTN,
    COLOR_APPBAR_BG,
    COLOR_APPBAR_FG,
    COLOR_BG,
    COLOR_CARD,
    COLOR_DANGER,
    COLOR_PRIMARY,
    COLOR_TEXT_MUTED,
)
from support_console.domain.models import PRIORITIES, STATUSES
from support_console.sync.session import SyncSession
from support_console.ui.alerts import show_notice
from support_console.ui.components.detail_panel import TicketDetailPanel
from support_console.ui.components.ticket_card import TicketListCard
from support_console.ui.helpers import initial, priority_label, status_label

logger = logging.getLogger(__name__)


def build_appbar(user: str, refresh_failed: bool) -> ft.AppBar:
    actions = []
    if refresh_failed:
        actions.append(
            ft.Container(
                content=ft.Row(
                    controls=[
                        ft.Icon(ft.Icons.SYNC_PROBLEM, color=COLOR_DANGER, size=18),
                        ft.Text("更新できませんでした", color=COLOR_DANGER, size=12),
                    ],
                    spacing=4,
                ),
                padding=ft.Padding.only(right=12),
            )
        )
    actions.append(
        ft.Container(
            content=ft.CircleAvatar(
                content=ft.Text(initial(user)),
                radius=16,
                bgcolor=COLOR_PRIMARY,
                color="white",
                tooltip=user,
            ),
            padding=ft.Padding.only(right=16),
        )
    )
    return ft.AppBar(
        title=ft.Text(APP_TITLE, weight=ft.FontWeight.BOLD, color=COLOR_APPBAR_FG),
        bgcolor=COLOR_APPBAR_BG,
        actions=actions,
    )


def build_console_view(page: ft.Page, session: SyncSession, user: str) -> ft.View:
    """List on the left, selected ticket on the right; re-rendered on every merge."""
    search_task: asyncio.Task | None = None
    list_column_ref = ft.Ref[ft.Column]()
    filter_row_ref = ft.Ref[ft.Column]()

    # --- Actions ---

    def on_select_ticket(ticket_id: int):
        if not session.select(ticket_id):
            # Already open: still refresh so the admin sees the latest thread
            session.refresh_detail()

    def on_close_panel():
        session.clear_selection()

    async def run_action(coro, failure_message: str) -> bool:
        ok = await coro
        if not ok:
            show_notice(page, failure_message, bgcolor=COLOR_DANGER)
        return ok

    async def on_send():
        await run_action(session.send_reply(), "返信の送信に失敗しました")

    async def on_update(**fields):
        await run_action(session.update_ticket(**fields), "チケットの更新に失敗しました")

    async def on_assign(assignee: str):
        await run_action(session.assign(assignee), "担当者の設定に失敗しました")

    async def on_add_note(body: str) -> bool:
        return await run_action(session.add_note(body), "メモの追加に失敗しました")

    detail_panel = TicketDetailPanel(
        user=user,
        on_close=on_close_panel,
        on_update=on_update,
        on_assign=on_assign,
        on_add_note=on_add_note,
        on_toggle_notes=session.toggle_notes_panel,
        on_draft_change=session.set_draft,
        on_send=on_send,
        on_scroll_anchor=session.set_scroll_anchor,
    )

    # --- Filters ---

    def build_tab_btn(label: str, selected: bool, on_click) -> ft.Container:
        color = COLOR_PRIMARY if selected else COLOR_TEXT_MUTED
        return ft.Container(
            content=ft.Text(
                label,
                color=color,
                weight=ft.FontWeight.BOLD if selected else ft.FontWeight.NORMAL,
            ),
            padding=ft.Padding.symmetric(vertical=10, horizontal=16),
            border=ft.border.only(
                bottom=ft.BorderSide(2, COLOR_PRIMARY if selected else "transparent")
            ),
            on_click=on_click,
            ink=True,
            border_radius=ft.border_radius.only(top_left=6, top_right=6),
        )

    def build_filter_rows() -> list[ft.Control]:
        flt = session.filter
        status_tabs = [build_tab_btn("すべて", flt.status == "", lambda _e: session.set_filters(status=""))]
        status_tabs += [
            build_tab_btn(status_label(s), flt.status == s, lambda _e, v=s: session.set_filters(status=v))
            for s in STATUSES
        ]
        priority_tabs = [build_tab_btn("全優先度", flt.priority == "", lambda _e: session.set_filters(priority=""))]
        priority_tabs += [
            build_tab_btn(priority_label(p), flt.priority == p, lambda _e, v=p: session.set_filters(priority=v))
            for p in PRIORITIES
        ]
        return [
            ft.Row(controls=status_tabs, spacing=0, wrap=True),
            ft.Row(controls=priority_tabs, spacing=0, wrap=True),
        ]

    async def _debounced_search(term_snapshot: str):
        # Debounce to avoid re-filtering the list on every keystroke
        try:
            await asyncio.sleep(0.5)
        except asyncio.CancelledError:
            return
        if term_snapshot == search_field.value:
            session.set_filters(keyword=term_snapshot)

    def on_search(e):
        nonlocal search_task
        if search_task and not search_task.done():
            search_task.cancel()

        async def runner(term: str):
            await _debounced_search(term)

        search_task = page.run_task(runner, e.control.value or "")

    search_field = ft.TextField(
        prefix_icon=ft.Icons.SEARCH,
        hint_text="チケットを検索...",
        value=session.filter.keyword,
        on_change=on_search,
        border_radius=BORDER_RADIUS_BTN,
        border_color="transparent",
        bgcolor=COLOR_CARD,
        content_padding=ft.Padding.symmetric(horizontal=12, vertical=12),
        text_size=14,
    )

    # --- Rendering ---

    def build_cards() -> list[ft.Control]:
        tickets = session.visible_tickets()
        if not tickets:
            return [
                ft.Container(
                    content=ft.Column(
                        [
                            ft.Icon(ft.Icons.INBOX, size=64, color="#d0d7de"),
                            ft.Text("該当するチケットはありません", color=COLOR_TEXT_MUTED, size=16),
                        ],
                        horizontal_alignment=ft.CrossAxisAlignment.CENTER,
                    ),
                    alignment=ft.Alignment.CENTER,
                    padding=60,
                )
            ]
        return [
            TicketListCard(
                t,
                unread=session.unread(t),
                selected=session.store.is_selected(t.id),
                on_click_callback=on_select_ticket,
            )
            for t in tickets
        ]

    def render():
        col = list_column_ref.current
        filters = filter_row_ref.current
        if col is None or filters is None:
            return
        col.controls = build_cards()
        filters.controls = build_filter_rows()
        detail_panel.render(session.selected, session.store.local)
        view.appbar = build_appbar(user, session.last_list_error is not None)
        page.update()

    view = ft.View(
        route="/",
        appbar=build_appbar(user, False),
        bgcolor=COLOR_BG,
        padding=ft.Padding.symmetric(horizontal=24, vertical=16),
        controls=[
            ft.Row(
                controls=[
                    ft.Column(
                        controls=[
                            search_field,
                            ft.Column(ref=filter_row_ref, controls=build_filter_rows(), spacing=0),
                            ft.Column(
                                ref=list_column_ref,
                                controls=build_cards(),
                                scroll=ft.ScrollMode.AUTO,
                                expand=True,
                            ),
                        ],
                        spacing=8,
                        expand=True,
                    ),
                    detail_panel,
                ],
                spacing=16,
                expand=True,
                vertical_alignment=ft.CrossAxisAlignment.STRETCH,
            )
        ],
    )

    session.add_listener(render)
    return view
