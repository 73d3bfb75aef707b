import flet as ft

from support_console.config import (
    BORDER_RADIUS_BTN,
    BORDER_RADIUS_CARD,
    COLOR_BORDER,
    COLOR_BUBBLE_ADMIN,
    COLOR_BUBBLE_USER,
    COLOR_CARD,
    COLOR_DANGER,
    COLOR_PRIMARY,
    COLOR_TEXT_MAIN,
    COLOR_TEXT_MUTED,
    DETAIL_PANEL_WIDTH,
)
from support_console.domain.models import PRIORITIES, ROLE_ADMIN, STATUSES
from support_console.ui.components.reply_form import ReplyForm
from support_console.ui.helpers import (
    format_datetime,
    priority_color,
    priority_label,
    status_color,
    status_label,
)


class TicketDetailPanel(ft.Container):
    """
    Side panel for the selected ticket.

    Input controls (reply, assignee, note) are created once and reused on every
    render, so a poll tick refreshing the thread never resets what the admin
    is typing.
    """

    def __init__(
        self,
        user: str,
        on_close,
        on_update,
        on_assign,
        on_add_note,
        on_toggle_notes,
        on_draft_change,
        on_send,
        on_scroll_anchor,
    ):
        super().__init__()
        self.user = user
        self.on_close = on_close
        self.on_update = on_update
        self.on_assign = on_assign
        self.on_add_note = on_add_note
        self.on_toggle_notes = on_toggle_notes
        self.on_scroll_anchor = on_scroll_anchor

        self.width = DETAIL_PANEL_WIDTH
        self.bgcolor = COLOR_CARD
        self.border_radius = BORDER_RADIUS_CARD
        self.padding = ft.Padding.all(16)
        self.shadow = ft.BoxShadow(
            blur_radius=4,
            color=ft.Colors.BLACK12,
            offset=ft.Offset(0, 1),
        )
        self.visible = False

        self.reply_form = ReplyForm(user, on_draft_change, on_send)
        self.assignee_input = ft.TextField(
            hint_text="担当者",
            dense=True,
            expand=True,
            border_color=COLOR_BORDER,
            focused_border_color=COLOR_PRIMARY,
            border_radius=BORDER_RADIUS_BTN,
        )
        self.note_input = ft.TextField(
            hint_text="内部メモを入力...",
            multiline=True,
            min_lines=2,
            max_lines=4,
            expand=True,
            border_color=COLOR_BORDER,
            focused_border_color=COLOR_PRIMARY,
            border_radius=BORDER_RADIUS_BTN,
        )
        self._assignee_for: int | None = None

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    async def _on_assign_click(self, e):
        await self.on_assign((self.assignee_input.value or "").strip())

    async def _on_add_note_click(self, e):
        body = (self.note_input.value or "").strip()
        if not body:
            return
        if await self.on_add_note(body):
            self.note_input.value = ""
            self.note_input.update()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _chip(self, label: str, color: str, active: bool, on_click) -> ft.Container:
        return ft.Container(
            content=ft.Text(
                label,
                size=12,
                color="white" if active else color,
                weight=ft.FontWeight.BOLD if active else ft.FontWeight.NORMAL,
            ),
            bgcolor=color if active else None,
            border=ft.border.all(1, color),
            border_radius=12,
            padding=ft.Padding.symmetric(horizontal=10, vertical=4),
            on_click=on_click,
            ink=True,
        )

    def _status_row(self, ticket) -> ft.Row:
        def make_handler(value):
            async def handler(_e):
                if value != ticket["status"]:
                    await self.on_update(status=value)

            return handler

        return ft.Row(
            controls=[
                self._chip(status_label(s), status_color(s), s == ticket["status"], make_handler(s))
                for s in STATUSES
            ],
            spacing=6,
            wrap=True,
        )

    def _priority_row(self, ticket) -> ft.Row:
        def make_handler(value):
            async def handler(_e):
                if value != ticket["priority"]:
                    await self.on_update(priority=value)

            return handler

        return ft.Row(
            controls=[
                self._chip(priority_label(p), priority_color(p), p == ticket["priority"], make_handler(p))
                for p in PRIORITIES
            ],
            spacing=6,
            wrap=True,
        )

    def _message_bubble(self, m) -> ft.Row:
        mine = m["sender_role"] == ROLE_ADMIN
        bubble = ft.Container(
            content=ft.Column(
                controls=[
                    ft.Row(
                        controls=[
                            ft.Text(m["sender_name"] or m["sender_role"], weight=ft.FontWeight.BOLD, size=12),
                            ft.Text(format_datetime(m["created_at"]), size=11, color=COLOR_TEXT_MUTED),
                        ],
                        spacing=8,
                    ),
                    ft.Text(m["body"], size=14, color=COLOR_TEXT_MAIN, selectable=True),
                ],
                spacing=4,
                tight=True,
            ),
            bgcolor=COLOR_BUBBLE_ADMIN if mine else COLOR_BUBBLE_USER,
            border=ft.border.all(1, COLOR_BORDER),
            border_radius=BORDER_RADIUS_CARD,
            padding=ft.Padding.symmetric(horizontal=12, vertical=8),
            width=DETAIL_PANEL_WIDTH * 0.75,
        )
        return ft.Row(
            controls=[bubble],
            alignment=ft.MainAxisAlignment.END if mine else ft.MainAxisAlignment.START,
        )

    def _thread(self, ticket, anchor: int | None) -> ft.ListView:
        controls = []
        for m in ticket["messages"]:
            controls.append(self._message_bubble(m))
            if anchor is not None and m["id"] == anchor and m is not ticket["messages"][-1]:
                controls.append(
                    ft.Row(
                        controls=[
                            ft.Container(content=ft.Divider(height=1, color=COLOR_DANGER), expand=True),
                            ft.Text("ここから新着", size=11, color=COLOR_DANGER),
                        ],
                        spacing=8,
                    )
                )
        if not controls:
            controls.append(ft.Text("メッセージはまだありません", color=COLOR_TEXT_MUTED, size=13))
        return ft.ListView(controls=controls, spacing=8, expand=True, auto_scroll=True)

    def _notes_block(self, ticket) -> ft.Container:
        notes = [
            ft.Container(
                content=ft.Column(
                    controls=[
                        ft.Text(
                            f"{n['author']} ・ {format_datetime(n['created_at'])}",
                            size=11,
                            color=COLOR_TEXT_MUTED,
                        ),
                        ft.Text(n["body"], size=13, color=COLOR_TEXT_MAIN),
                    ],
                    spacing=2,
                    tight=True,
                ),
                padding=ft.Padding.symmetric(horizontal=8, vertical=6),
                bgcolor="#FFF8C5",
                border_radius=BORDER_RADIUS_BTN,
            )
            for n in ticket["notes"]
        ]
        return ft.Container(
            content=ft.Column(
                controls=[
                    ft.Text("📝  内部メモ", weight=ft.FontWeight.BOLD, size=13),
                    *notes,
                    ft.Row(
                        controls=[
                            self.note_input,
                            ft.IconButton(
                                icon=ft.Icons.NOTE_ADD,
                                icon_color=COLOR_PRIMARY,
                                tooltip="メモを追加",
                                on_click=self._on_add_note_click,
                            ),
                        ],
                        vertical_alignment=ft.CrossAxisAlignment.START,
                    ),
                ],
                spacing=6,
                scroll=ft.ScrollMode.AUTO,
            ),
            height=220,
            padding=ft.Padding.only(top=8),
            border=ft.border.only(top=ft.BorderSide(1, COLOR_BORDER)),
        )

    def render(self, ticket, local) -> None:
        """Rebuild the panel from the selected ticket and local selection state."""
        if ticket is None:
            self.visible = False
            self.content = None
            return
        self.visible = True

        # Seed the assignee field once per ticket; later renders keep what is typed
        if self._assignee_for != ticket["id"]:
            self._assignee_for = ticket["id"]
            self.assignee_input.value = ticket["assignee"] or ""
            self.note_input.value = ""

        messages = ticket["messages"]
        if local.scroll_anchor is None and messages:
            self.on_scroll_anchor(messages[-1]["id"])

        self.reply_form.sync_from(local.draft_reply)

        header = ft.Row(
            controls=[
                ft.Text(
                    f"#{ticket['id']}  {ticket['subject']}",
                    weight=ft.FontWeight.BOLD,
                    size=18,
                    color=COLOR_TEXT_MAIN,
                    expand=True,
                    max_lines=2,
                    overflow=ft.TextOverflow.ELLIPSIS,
                ),
                ft.IconButton(
                    icon=ft.Icons.STICKY_NOTE_2 if local.notes_panel_open else ft.Icons.STICKY_NOTE_2_OUTLINED,
                    icon_color=COLOR_PRIMARY,
                    tooltip="内部メモ",
                    on_click=lambda _e: self.on_toggle_notes(),
                ),
                ft.IconButton(
                    icon=ft.Icons.CLOSE,
                    tooltip="閉じる",
                    on_click=lambda _e: self.on_close(),
                ),
            ],
            vertical_alignment=ft.CrossAxisAlignment.START,
        )

        meta = ft.Column(
            controls=[
                ft.Text(
                    f"依頼者: {ticket['user_id'] or '不明'}  ・  作成: {format_datetime(ticket['created_at'])}",
                    size=12,
                    color=COLOR_TEXT_MUTED,
                ),
                self._status_row(ticket),
                self._priority_row(ticket),
                ft.Row(
                    controls=[
                        self.assignee_input,
                        ft.IconButton(
                            icon=ft.Icons.PERSON_ADD,
                            icon_color=COLOR_PRIMARY,
                            tooltip="担当者を設定",
                            on_click=self._on_assign_click,
                        ),
                    ],
                ),
                ft.Text(ticket["description"] or "（説明なし）", size=13, color=COLOR_TEXT_MAIN),
            ],
            spacing=8,
        )

        self.content = ft.Column(
            controls=[
                header,
                meta,
                ft.Divider(height=1, color=COLOR_BORDER),
                self._thread(ticket, local.scroll_anchor),
                *([self._notes_block(ticket)] if local.notes_panel_open else []),
                self.reply_form,
            ],
            spacing=10,
            expand=True,
        )
