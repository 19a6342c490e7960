"""Terminal UI module for wxve-chat.

Provides a Textual-based TUI for chatting with the wxve.io assistant.

Module structure (each module hides a design decision):
- config.py: Constants and log levels
- formatting.py: Markdown, failure wording and chart files
- widgets.py: Custom widgets (input bar, chat history, live response, log panel)
- styles.py: CSS styling (layout decisions)
- themes.py: Color palettes and theme configuration
- callbacks.py: Core integration (how the TUI receives updates)
- app.py: Application orchestration (user interaction flow)
"""

from .app import WxveChatApp, run_textual_tui
from .callbacks import DebugRouter, ResponseRenderer
from .config import LogLevel
from .widgets import ChatHistoryWidget, ChatInputBar, DebugPanel, ResponseView

__all__ = [
    "ChatHistoryWidget",
    "ChatInputBar",
    "DebugPanel",
    "DebugRouter",
    "LogLevel",
    "ResponseRenderer",
    "ResponseView",
    "WxveChatApp",
    "run_textual_tui",
]
