"""Light palette shared by the stylesheet and inline widget styles"""


class Palette:
    """Colors by role, not by hue"""

    ACCENT = "#2383E2"
    ACCENT_PRESSED = "#0077D4"
    ACCENT_DISABLED = "#BDBDBD"

    SURFACE = "#FFFFFF"
    SURFACE_MUTED = "#F7F6F3"
    SURFACE_HOVER = "#EFEFEF"
    SELECTION = "#E3F2FD"
    SELECTION_TEXT = "#1976D2"

    TEXT = "#37352F"
    TEXT_MUTED = "#787774"
    TEXT_FAINT = "#9B9A97"
    TEXT_ON_ACCENT = "#FFFFFF"

    OUTLINE = "#E5E5E5"

    # Save/export/auth feedback
    MESSAGE_OK = "#0F7B6C"
    MESSAGE_OK_BG = "#DBEDDB"
    MESSAGE_ERROR = "#E03E3E"
    MESSAGE_ERROR_BG = "#FBE4E4"
