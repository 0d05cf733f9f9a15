"""
Textual Application - Terminal chat with the doctor
===================================================

This module implements the Textual TUI: a chat log, an input whose
placeholder rotates through hints until the first message, and a
typing indicator shown while the reply is on its way.
"""

import asyncio
from typing import Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.widgets import Header, Footer, Static, Input
from textual import work

from core.config import Config, load_config
from core.logging import get_logger
from services.pacing import HintRotator, stream_reply
from services.responder import Responder, create_responder

logger = get_logger("tui.app")


class ChatMessage(Static):
    """A single chat bubble."""

    def __init__(self, text: str, **kwargs):
        super().__init__(text, markup=False, **kwargs)


class DoctorChatApp(App):
    """
    Terminal chat front end.

    Replies are computed by the responder in one go; this app only
    paces their display.
    """

    CSS = """
    Screen {
        background: $surface;
    }

    #chat-title {
        text-align: center;
        text-style: bold;
        color: $primary;
        margin: 1 0;
    }

    #chat-log {
        height: 1fr;
        padding: 0 1;
    }

    .user-message {
        color: $text;
        background: $primary 20%;
        margin: 1 0 0 12;
        padding: 0 1;
    }

    .bot-message {
        color: $text;
        background: $panel;
        margin: 1 12 0 0;
        padding: 0 1;
    }

    #typing-indicator {
        color: $text-muted;
        padding: 0 2;
        height: 1;
    }

    Input {
        margin: 0 1 1 1;
    }
    """

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        Binding("ctrl+r", "reset", "Reset cursors"),
    ]

    def __init__(
        self,
        config: Optional[Config] = None,
        responder: Optional[Responder] = None
    ):
        super().__init__()
        self.config = config or load_config()
        self.responder = responder or create_responder(self.config)
        self.hints = HintRotator(self.config.ui.hints)
        self.chat_started = False
        self.hint_timer = None
        self.pending_replies = 0
        self.reply_lock: Optional[asyncio.Lock] = None
        self.title = self.config.app_name

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield Static(self.config.app_name, id="chat-title")
        yield VerticalScroll(id="chat-log")
        yield Static("● ● ●", id="typing-indicator")
        yield Input(placeholder=self.hints.next(), id="user-input")
        yield Footer()

    def on_mount(self) -> None:
        self.reply_lock = asyncio.Lock()
        self.query_one("#typing-indicator").display = False
        self.hint_timer = self.set_interval(self.config.ui.hint_interval, self.rotate_hint)
        self.query_one("#user-input", Input).focus()

    def rotate_hint(self) -> None:
        user_input = self.query_one("#user-input", Input)
        if self.chat_started or user_input.value.strip():
            return
        user_input.placeholder = self.hints.next()

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        text = event.value.strip()
        if not text:
            return

        if not self.chat_started:
            self.chat_started = True
            if self.hint_timer:
                self.hint_timer.stop()
            event.input.placeholder = ""
            self.query_one("#chat-title").display = False

        event.input.value = ""

        chat_log = self.query_one("#chat-log", VerticalScroll)
        await chat_log.mount(ChatMessage(text, classes="user-message"))
        chat_log.scroll_end(animate=True)

        self.pending_replies += 1
        self.query_one("#typing-indicator").display = True
        self.send_reply(text)

    @work(group="replies")
    async def send_reply(self, text: str) -> None:
        """Reply to one message. Replies run one at a time, in submission order."""
        ui = self.config.ui
        indicator = self.query_one("#typing-indicator")
        chat_log = self.query_one("#chat-log", VerticalScroll)

        async with self.reply_lock:
            await asyncio.sleep(ui.reply_delay)
            reply = self.responder.reply(text)
            self.pending_replies -= 1
            indicator.display = self.pending_replies > 0

            message = ChatMessage("", classes="bot-message")
            await chat_log.mount(message)

            shown = ""
            async for char in stream_reply(reply, delay=0, interval=ui.stream_interval):
                shown += char
                message.update(shown)
                chat_log.scroll_end(animate=False)

            chat_log.scroll_end(animate=True)

    def action_reset(self) -> None:
        self.responder.reset()
        self.notify("Rotation cursors reset", title="Reset")


def run_tui(config: Optional[Config] = None) -> None:
    app = DoctorChatApp(config=config)
    app.run()


if __name__ == "__main__":
    run_tui()
