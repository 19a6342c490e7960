"""Theme definitions for the TUI.

This module hides the design decisions about:
- Color palettes and visual appearance
- Theme variables (borders, scrollbars, etc.)
- Dark/light mode configuration

The dark/light choice is a UI preference owned by the app; nothing in the
protocol core depends on it.
"""

from textual.theme import Theme

from .config import DARK_THEME, LIGHT_THEME

# Catppuccin Mocha: dark mode
CATPPUCCIN_MOCHA = Theme(
    name=DARK_THEME,
    primary="#89b4fa",      # Blue - main accent
    secondary="#cba6f7",    # Mauve - assistant messages
    accent="#f9e2af",       # Yellow - tool indicator
    foreground="#cdd6f4",
    background="#11111b",
    success="#a6e3a1",      # Green - user messages, send button
    warning="#fab387",
    error="#f38ba8",
    surface="#1e1e2e",
    panel="#181825",
    dark=True,
    variables={
        "block-cursor-foreground": "#11111b",
        "block-cursor-background": "#f5e0dc",
        "block-cursor-text-style": "bold",
        "input-cursor-background": "#cdd6f4",
        "input-cursor-foreground": "#11111b",
        "input-selection-background": "#89b4fa 30%",
        "border": "#45475a",
        "border-blurred": "#313244",
        "scrollbar": "#313244",
        "scrollbar-hover": "#45475a",
        "scrollbar-active": "#89b4fa",
        "scrollbar-background": "#181825",
        "footer-foreground": "#bac2de",
        "footer-background": "#11111b",
        "footer-key-foreground": "#f9e2af",
        "footer-key-background": "#313244",
        "text-muted": "#6c7086",
        "text-disabled": "#45475a",
        "link-color": "#89b4fa",
        "link-style": "underline",
    },
)

# Catppuccin Latte: light mode
CATPPUCCIN_LATTE = Theme(
    name=LIGHT_THEME,
    primary="#1e66f5",
    secondary="#8839ef",
    accent="#df8e1d",
    foreground="#4c4f69",
    background="#eff1f5",
    success="#40a02b",
    warning="#fe640b",
    error="#d20f39",
    surface="#e6e9ef",
    panel="#dce0e8",
    dark=False,
    variables={
        "block-cursor-foreground": "#eff1f5",
        "block-cursor-background": "#dc8a78",
        "block-cursor-text-style": "bold",
        "input-cursor-background": "#4c4f69",
        "input-cursor-foreground": "#eff1f5",
        "input-selection-background": "#1e66f5 25%",
        "border": "#acb0be",
        "border-blurred": "#bcc0cc",
        "scrollbar": "#bcc0cc",
        "scrollbar-hover": "#acb0be",
        "scrollbar-active": "#1e66f5",
        "scrollbar-background": "#dce0e8",
        "footer-foreground": "#5c5f77",
        "footer-background": "#eff1f5",
        "footer-key-foreground": "#df8e1d",
        "footer-key-background": "#ccd0da",
        "text-muted": "#8c8fa1",
        "text-disabled": "#acb0be",
        "link-color": "#1e66f5",
        "link-style": "underline",
    },
)

THEMES = (CATPPUCCIN_MOCHA, CATPPUCCIN_LATTE)


def toggled_theme(current: str) -> str:
    """Return the theme name that flips dark/light mode."""
    return LIGHT_THEME if current == DARK_THEME else DARK_THEME
