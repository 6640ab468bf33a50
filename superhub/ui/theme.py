"""UI Theme Constants for Super Hub.

Centralises all colour, font, and sizing constants for the
CustomTkinter interface.  Dark content area with a teal accent,
matching the portal's web palette.

This file contains **zero logic**, only ``Final`` constants.
"""

from __future__ import annotations

from typing import Final

# ---------------------------------------------------------------------------
# Colour palette
# ---------------------------------------------------------------------------

CONTENT_BG: Final[str] = "#0a0a0f"
CONTENT_CARD_BG: Final[str] = "#14141f"
CARD_BORDER: Final[str] = "#26263a"

ACCENT_PRIMARY: Final[str] = "#00e3a5"
ACCENT_HOVER: Final[str] = "#00c18c"
TEXT_PRIMARY: Final[str] = "#f5f5f7"
TEXT_SECONDARY: Final[str] = "#9a9ab0"
TEXT_ON_ACCENT: Final[str] = "#0a0a0f"

# Input / form
INPUT_BG: Final[str] = "#1c1c2b"
INPUT_BORDER: Final[str] = "#33334d"
INPUT_BORDER_ERROR: Final[str] = "#ef4444"
INPUT_BORDER_VALID: Final[str] = "#22c55e"
ERROR_TEXT: Final[str] = "#f87171"
SUCCESS_TEXT: Final[str] = "#34d399"
HINT_TEXT: Final[str] = "#fbbf24"

# Password strength bar, by label
STRENGTH_COLORS: Final[dict[str, str]] = {
    "Weak": "#ef4444",
    "Fair": "#f97316",
    "Good": "#eab308",
    "Strong": "#22c55e",
}
STRENGTH_EMPTY: Final[str] = "#26263a"

LINK_HOVER: Final[str] = "#1c1c2b"
LOGOUT_PRIMARY: Final[str] = "#ef4444"
LOGOUT_HOVER: Final[str] = "#b91c1c"

# ---------------------------------------------------------------------------
# Fonts (Segoe UI, fallback to system)
# ---------------------------------------------------------------------------

FONT_FAMILY: Final[str] = "Segoe UI"
FONT_BRAND: Final[tuple[str, int, str]] = (FONT_FAMILY, 22, "bold")
FONT_ICON_LG: Final[tuple[str, int, str]] = (FONT_FAMILY, 24, "bold")
FONT_HEADING: Final[tuple[str, int, str]] = (FONT_FAMILY, 20, "bold")
FONT_SUBTITLE: Final[tuple[str, int]] = (FONT_FAMILY, 12)
FONT_BODY: Final[tuple[str, int]] = (FONT_FAMILY, 13)
FONT_LABEL: Final[tuple[str, int, str]] = (FONT_FAMILY, 11, "bold")
FONT_SMALL: Final[tuple[str, int]] = (FONT_FAMILY, 11)
FONT_CAPTION: Final[tuple[str, int]] = (FONT_FAMILY, 10)
FONT_BUTTON: Final[tuple[str, int, str]] = (FONT_FAMILY, 13, "bold")
FONT_OTP: Final[tuple[str, int, str]] = (FONT_FAMILY, 22, "bold")

# ---------------------------------------------------------------------------
# Dimensions
# ---------------------------------------------------------------------------

MAIN_WINDOW_WIDTH: Final[int] = 1100
MAIN_WINDOW_HEIGHT: Final[int] = 760
MIN_WINDOW_WIDTH: Final[int] = 480
MIN_WINDOW_HEIGHT: Final[int] = 640
CARD_WIDTH: Final[int] = 440
INPUT_HEIGHT: Final[int] = 44
BUTTON_HEIGHT: Final[int] = 46
OTP_SLOT_SIZE: Final[int] = 52
CORNER_RADIUS: Final[int] = 8
PADDING_SM: Final[int] = 8
PADDING_MD: Final[int] = 16
PADDING_LG: Final[int] = 24
