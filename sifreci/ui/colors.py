"""Theme colors and color utilities for the UI."""


class CipherColors:
    """Soft pastel palette for the cipher screen."""

    BG = "#fdf2f8"
    BG_BLOB_BLUE = "#dbeafe"
    BG_BLOB_YELLOW = "#fef9c3"

    PRIMARY = "#4f46e5"
    PRIMARY_LIGHT = "#e0e7ff"
    PRIMARY_MUTED = "#a5b4fc"

    CARD_BG = "rgba(255, 255, 255, 0.90)"
    CARD_BORDER = "#e0e7ff"

    SLOT_BG = "#f9fafb"
    SLOT_BORDER = "#d1d5db"
    SLOT_TEXT = "#d1d5db"

    OPTION_BG = "#ffffff"
    OPTION_BORDER = "#93c5fd"
    SUCCESS_BG = "#dcfce7"
    SUCCESS_BORDER = "#22c55e"
    ERROR_BG = "#fef2f2"
    ERROR_BORDER = "#fecaca"

    STAR = "#ca8a04"
    STAR_BORDER = "#fde68a"

    TEXT_PRIMARY = "#1f2937"
    TEXT_MUTED = "#9ca3af"


def blend_hex(a: str, b: str, t: float) -> str:
    """Blend two #RRGGBB colors. t=0 -> a, t=1 -> b."""
    a = a.strip()
    b = b.strip()
    if not (a.startswith("#") and b.startswith("#") and len(a) == 7 and len(b) == 7):
        return a
    try:
        ar, ag, ab = int(a[1:3], 16), int(a[3:5], 16), int(a[5:7], 16)
        br, bg, bb = int(b[1:3], 16), int(b[3:5], 16), int(b[5:7], 16)
    except ValueError:
        return a
    t = max(0.0, min(1.0, float(t)))
    r = int(ar + (br - ar) * t)
    g = int(ag + (bg - ag) * t)
    bl = int(ab + (bb - ab) * t)
    return f"#{r:02X}{g:02X}{bl:02X}"


def faded(color: str, amount: float = 0.6) -> str:
    """Wash a color out toward white, for options that are no longer in play."""
    return blend_hex(color, "#FFFFFF", amount)
