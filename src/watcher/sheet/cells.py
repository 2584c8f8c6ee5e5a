"""Cell value encoding for the Google Sheets API.

Values written through an insert are converted into ``CellData`` dicts as
accepted by ``appendCells`` requests. Plain values become string cells, a
``Cell`` can additionally carry a hyperlink and a status colour.

Example:
    >>> encode_cell(Cell(text="Pending", hyperlink="https://x", status=CellStatus.NEUTRAL))
    {'userEnteredValue': {'formulaValue': '=HYPERLINK("https://x";"Pending")'},
     'userEnteredFormat': {'backgroundColor': {...}}}
"""

from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel


class Color(BaseModel):
    """RGB colour with 0..1 channels, as the Sheets API expects it."""

    red: float
    green: float
    blue: float


class CellStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    WARNING = "warning"
    NEUTRAL = "neutral"
    REJECTED = "rejected"


class Cell(BaseModel):
    text: str = ""
    hyperlink: str = ""
    status: CellStatus | None = None


def parse_hex_color(value: str) -> Color:
    """Parse ``#rrggbb`` or ``#rgb`` into a Color.

    Raises:
        ValueError: If the value is not a hex colour.
    """
    digits = value.removeprefix("#")
    if not value.startswith("#") or len(digits) not in (3, 6):
        raise ValueError(f"Invalid hex color: {value}")

    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)

    r, g, b = (int(digits[i : i + 2], 16) for i in (0, 2, 4))
    return Color(red=r / 0xFF, green=g / 0xFF, blue=b / 0xFF)


Palette = Mapping[CellStatus, Color]

DEFAULT_PALETTE: Palette = MappingProxyType(
    {
        CellStatus.SUCCESS: parse_hex_color("#b6d7a8"),
        CellStatus.FAILURE: parse_hex_color("#ea9999"),
        CellStatus.WARNING: parse_hex_color("#f9cb9c"),
        CellStatus.NEUTRAL: parse_hex_color("#fff2cc"),
        CellStatus.REJECTED: parse_hex_color("#b4a7d6"),
    }
)


def _quote(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def hyperlink_formula(link: str, text: str = "") -> str:
    if text:
        return f"=HYPERLINK({_quote(link)};{_quote(text)})"
    return f"=HYPERLINK({_quote(link)})"


def encode_cell(value: Any, palette: Palette = DEFAULT_PALETTE) -> dict[str, Any]:
    """Convert a logical value into a Sheets ``CellData`` dict.

    Args:
        value: None, a Cell, or any value rendered with ``str()``.
        palette: Colours used for Cell status tags.

    Returns:
        A dict with ``userEnteredValue`` and ``userEnteredFormat`` keys.
    """
    cell: dict[str, Any] = {"userEnteredValue": {}, "userEnteredFormat": {}}

    if value is None:
        return cell

    if isinstance(value, Cell):
        if value.hyperlink:
            cell["userEnteredValue"]["formulaValue"] = hyperlink_formula(
                value.hyperlink, value.text
            )
        else:
            cell["userEnteredValue"]["stringValue"] = value.text

        color = palette.get(value.status) if value.status is not None else None
        if color is not None:
            cell["userEnteredFormat"]["backgroundColor"] = color.model_dump()
    else:
        cell["userEnteredValue"]["stringValue"] = str(value)

    return cell
