import pytest

from thermalprint.commands import (
    COMMANDS,
    SIZES,
    ControlEnum,
    PrintDirective,
    command,
    encode_text,
    parse_directive,
    raw_bytes,
)

HEADER = b"\x1d\x21\x00" + b"\x1c\x2e" + b"\x1b\x74\x10"


@pytest.mark.parametrize("size", [1, 2, 3, 4, 5])
def test_size_prefix_selects_size_sequence(size):
    assert encode_text(f"{size}//text") == HEADER + SIZES[size] + b"text"


@pytest.mark.parametrize("prefix", ["0", "6", "-1", "99", "big", ""])
def test_out_of_range_or_bad_size_falls_back_to_default(prefix):
    assert encode_text(f"{prefix}//text") == HEADER + b"\x1b\x4d\x00" + b"text"


def test_size_prefix_tolerates_whitespace():
    assert parse_directive(" 4 //x").size == 4


def test_plain_text_uses_default_size():
    assert encode_text("hello") == HEADER + b"\x1b\x4d\x00" + b"hello"


def test_size_three_example():
    assert encode_text("3//Hi") == HEADER + b"\x1d\x21\x11" + b"Hi"


def test_directive_keeps_only_second_segment():
    assert parse_directive("4//first//second") == PrintDirective(4, "first")


def test_non_numeric_prefix_is_consumed():
    assert parse_directive("abc//payload") == PrintDirective(2, "payload")


def test_latin1_text_and_replacement():
    assert encode_text("1//café").endswith(b"caf\xe9")
    assert encode_text("1//€").endswith(b"?")


def test_custom_encoding():
    assert encode_text("1//Ж", encoding="cp866").endswith(b"\x86")


def test_raw_bytes_ascii():
    assert raw_bytes([104, 101, 108, 108, 111]) == b"hello"


def test_raw_bytes_truncates_to_eight_bits():
    assert raw_bytes([256, 257, -1, -128]) == b"\x00\x01\xff\x80"


def test_raw_bytes_rejects_non_integers():
    with pytest.raises(TypeError):
        raw_bytes([1.5])


def test_command_table_is_read_only():
    with pytest.raises(TypeError):
        COMMANDS["INIT"] = b""


def test_command_lookup():
    assert command("feed_paper_and_cut") == b"\x1d\x56\x42\x00"
    assert command("SELECT_BIT_IMAGE_MODE") == b"\x1b\x2a\x21\x80\x00"
    assert COMMANDS["SIZE_0"] == COMMANDS["RESET_FONT"]
    with pytest.raises(KeyError):
        command("does_not_exist")


def test_control_characters():
    assert ControlEnum.ESC == 0x1B
    assert bytes((ControlEnum.GS, ControlEnum.LF)) == b"\x1d\n"
