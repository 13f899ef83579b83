"""ESC/POS command table and text encoding for thermal printers."""

import enum
import types
from typing import Iterable, NamedTuple

DEFAULT_SIZE = 2
MIN_SIZE = 1
MAX_SIZE = 5
DEFAULT_ENCODING = "iso-8859-1"
SIZE_DELIMITER = "//"


class ControlEnum(enum.IntEnum):
    STX = 2  # 0x02
    EOT = 4  # 0x04
    HT = 9  # 0x09
    LF = 10  # 0x0A
    CLR = 12  # 0x0C
    CR = 13  # 0x0D
    DLE = 16  # 0x10
    CAN = 24  # 0x18
    ESC = 27  # 0x1B
    FS = 28  # 0x1C
    GS = 29  # 0x1D
    US = 31  # 0x1F


# Font/size selectors, indexed by print size. Index 0 resets the font.
SIZES = (
    b"\x1d\x21\x00",  # GS ! 0, normal width and height
    b"\x1b\x4d\x01",  # ESC M 1, compressed ASCII font
    b"\x1b\x4d\x00",  # ESC M 0, standard ASCII font
    b"\x1d\x21\x11",  # GS ! 0x11, double width and height
    b"\x1d\x21\x22",  # GS ! 0x22, triple
    b"\x1d\x21\x33",  # GS ! 0x33, quadruple
)

COMMANDS = types.MappingProxyType(
    {
        "RESET_FONT": SIZES[0],
        "CANCEL_MULTIBYTE": b"\x1c\x2e",  # FS ., leave Kanji/Chinese mode
        "ESCAPE_MODE": b"\x1b\x74\x10",  # ESC t 16, code page WPC1252
        **{f"SIZE_{i}": seq for i, seq in enumerate(SIZES)},
        "INIT": bytes((27, 64)),
        "RESET_PRINTER": bytes((27, 64, 10)),
        "FEED_LINE": bytes((10,)),
        "ENTER": b"\n",
        "SELECT_FONT_A": bytes((20, 33, 0)),
        "SET_BAR_CODE_HEIGHT": bytes((29, 104, 100)),
        "PRINT_BAR_CODE_1": bytes((29, 107, 2)),
        "SEND_NULL_BYTE": bytes((0,)),
        "SELECT_PRINT_SHEET": bytes((27, 99, 48, 2)),
        "FEED_PAPER_AND_CUT": bytes((29, 86, 66, 0)),
        "SELECT_CYRILLIC_CHARACTER_CODE_TABLE": bytes((27, 116, 17)),
        "SELECT_BIT_IMAGE_MODE": bytes((27, 42, 33, 128, 0)),
        "SET_LINE_SPACING_24": bytes((27, 51, 24)),
        "SET_LINE_SPACING_30": bytes((27, 51, 30)),
        "TRANSMIT_DLE_PRINTER_STATUS": bytes((16, 4, 1)),
        "TRANSMIT_DLE_OFFLINE_PRINTER_STATUS": bytes((16, 4, 2)),
        "TRANSMIT_DLE_ERROR_STATUS": bytes((16, 4, 3)),
        "TRANSMIT_DLE_ROLL_PAPER_SENSOR_STATUS": bytes((16, 4, 4)),
        "ESC_FONT_COLOR_DEFAULT": bytes((27, 114, 0)),
        "FS_FONT_ALIGN": bytes((28, 33, 1, 27, 33, 1)),
        "ESC_ALIGN_LEFT": bytes((27, 97, 0)),
        "ESC_ALIGN_RIGHT": bytes((27, 97, 2)),
        "ESC_ALIGN_CENTER": bytes((27, 97, 1)),
        "ESC_CANCEL_BOLD": bytes((27, 69, 0)),
        "ESC_HORIZONTAL_CENTERS": bytes((27, 68, 20, 28, 0)),
        "ESC_CANCEL_HORIZONTAL_CENTERS": bytes((27, 68, 0)),
        "ESC_ENTER": bytes((27, 74, 64)),
        "PRINT_TEST": bytes((29, 40, 65)),
    }
)


class PrintDirective(NamedTuple):
    size: int
    text: str


def command(name: str) -> bytes:
    """Look up a command by its symbolic name (case-insensitive)."""
    return COMMANDS[name.upper()]


def parse_directive(value: str) -> PrintDirective:
    """Split ``"<size>//<text>"`` into a size and a text payload.

    Without the delimiter the whole value is the text and the size is the
    default. The size segment is always consumed; a size that is not a
    number or lies outside 1-5 becomes the default.
    """
    parts = value.split(SIZE_DELIMITER)
    if len(parts) == 1:
        return PrintDirective(DEFAULT_SIZE, value)
    try:
        size = int(parts[0])
    except ValueError:
        size = DEFAULT_SIZE
    if not MIN_SIZE <= size <= MAX_SIZE:
        size = DEFAULT_SIZE
    return PrintDirective(size, parts[1])


def encode_text(value: str, encoding: str = DEFAULT_ENCODING) -> bytes:
    """Encode a print directive into the bytes sent to the printer."""
    size, text = parse_directive(value)
    return b"".join(
        (
            COMMANDS["RESET_FONT"],
            COMMANDS["CANCEL_MULTIBYTE"],
            COMMANDS["ESCAPE_MODE"],
            SIZES[size],
            text.encode(encoding, errors="replace"),
        )
    )


def raw_bytes(values: Iterable[int]) -> bytes:
    """Truncate each integer to its low 8 bits."""
    return bytes(v & 0xFF for v in values)
