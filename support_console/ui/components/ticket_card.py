import flet as ft

from support_console.config import (
    BORDER_RADIUS_CARD,
    COLOR_CARD,
    COLOR_PRIMARY,
    COLOR_TEXT_MAIN,
    COLOR_TEXT_MUTED,
    COLOR_UNREAD,
)
from support_console.ui.helpers import (
    format_datetime,
    priority_color,
    priority_label,
    status_color,
    status_label,
)


class TicketListCard(ft.Container):
    def __init__(self, ticket, unread: int, selected: bool, on_click_callback):
        super().__init__()
        self.ticket = ticket
        self.unread = unread
        self.selected = selected
        self.on_click_callback = on_click_callback

        self.padding = ft.Padding.all(16)
        self.bgcolor = COLOR_CARD
        self.border_radius = BORDER_RADIUS_CARD
        self.border = ft.border.all(2 if selected else 1, COLOR_PRIMARY if selected else "transparent")
        self.shadow = ft.BoxShadow(
            blur_radius=2,
            color=ft.Colors.BLACK12,
            offset=ft.Offset(0, 1),
        )
        self.on_click = self._handle_click
        self.ink = True
        self.margin = ft.margin.only(bottom=12)

        self.content = self._build_content()

    def _handle_click(self, e):
        if self.on_click_callback:
            self.on_click_callback(self.ticket["id"])

    def _build_content(self):
        ticket = self.ticket
        assignee = ticket["assignee"] or "未割り当て"
        accent = status_color(ticket["status"])

        meta_row = [
            ft.Text(f"#{ticket['id']}", size=12, color=COLOR_TEXT_MUTED),
            ft.Text(
                f"{ticket['user_id'] or '不明'} が {format_datetime(ticket['created_at'])} に作成",
                size=12,
                color=COLOR_TEXT_MUTED,
            ),
            ft.Text(f"・  担当: {assignee}", size=12, color=COLOR_TEXT_MUTED),
            ft.Text(f"・  💬 {len(ticket['messages'])}", size=12, color=COLOR_TEXT_MUTED),
        ]

        trailing = [
            ft.Container(
                content=ft.Text(
                    priority_label(ticket["priority"]),
                    size=11,
                    color="white",
                    weight=ft.FontWeight.BOLD,
                ),
                bgcolor=priority_color(ticket["priority"]),
                border_radius=12,
                padding=ft.Padding.symmetric(horizontal=10, vertical=2),
            ),
        ]
        if self.unread:
            trailing.append(
                ft.Container(
                    content=ft.Text(str(self.unread), size=11, color="white", weight=ft.FontWeight.BOLD),
                    bgcolor=COLOR_UNREAD,
                    border_radius=12,
                    padding=ft.Padding.symmetric(horizontal=8, vertical=2),
                    tooltip="未読メッセージ",
                )
            )

        return ft.Row(
            controls=[
                ft.Icon(ft.Icons.SUPPORT_AGENT, size=24, color=accent),
                ft.Column(
                    controls=[
                        ft.Text(
                            ticket["subject"],
                            weight=ft.FontWeight.BOLD,
                            size=16,
                            color=COLOR_TEXT_MAIN,
                            max_lines=1,
                            overflow=ft.TextOverflow.ELLIPSIS,
                        ),
                        ft.Row(controls=meta_row, spacing=8, wrap=True),
                        ft.Text(
                            status_label(ticket["status"]),
                            size=12,
                            color=accent,
                            weight=ft.FontWeight.W_500,
                        ),
                    ],
                    spacing=4,
                    expand=True,
                ),
                ft.Row(controls=trailing, spacing=6),
            ],
            spacing=16,
            alignment=ft.MainAxisAlignment.START,
            vertical_alignment=ft.CrossAxisAlignment.START,
        )
