import flet as ft

from support_console.config import BORDER_RADIUS_BTN, COLOR_PRIMARY
from support_console.ui.helpers import initial


class ReplyForm(ft.Container):
    """Reply input bound to the session draft. Built once per console, never rebuilt by polling."""

    def __init__(self, user: str, on_draft_change, on_submit):
        super().__init__()
        self.user = user
        self.on_draft_change = on_draft_change
        self.on_submit = on_submit
        self.sending = False

        self.reply_input = ft.TextField(
            hint_text="返信を入力... ",
            multiline=True,
            min_lines=3,
            max_lines=6,
            border_color="transparent",
            bgcolor="white",
            border_radius=BORDER_RADIUS_BTN,
            expand=True,
            content_padding=ft.Padding.all(12),
            on_change=self._on_change,
        )
        self.send_button = ft.IconButton(
            icon=ft.Icons.SEND,
            icon_color=COLOR_PRIMARY,
            tooltip="送信",
            on_click=self._on_submit,
        )

        self.content = ft.Row(
            controls=[
                ft.CircleAvatar(
                    content=ft.Text(initial(self.user)),
                    radius=16,
                    bgcolor=COLOR_PRIMARY,
                    color="white",
                ),
                self.reply_input,
                self.send_button,
            ],
            vertical_alignment=ft.CrossAxisAlignment.START,
        )

    def sync_from(self, draft: str) -> None:
        """Adopt the session draft when the session changed it (send, ticket switch)."""
        if (self.reply_input.value or "") != draft:
            self.reply_input.value = draft

    def _on_change(self, e):
        self.on_draft_change(e.control.value or "")

    async def _on_submit(self, e):
        if self.sending or not (self.reply_input.value or "").strip():
            return
        self.sending = True
        self.send_button.disabled = True
        self.send_button.update()
        try:
            await self.on_submit()
        finally:
            self.sending = False
            self.send_button.disabled = False
            self.send_button.update()
