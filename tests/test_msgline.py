import pytest

from medit.msgline import (
    ReplyAborted,
    expand_escapes,
    format_int,
    format_message,
    read_reply,
)


@pytest.mark.parametrize("radix", [2, 8, 10, 16])
@pytest.mark.parametrize("value", [0, 1, 7, 8, 15, 255, 1000, -42])
def test_format_int_round_trip(value, radix):
    assert int(format_int(value, radix), radix) == value


def test_format_int_lowercase_hex():
    assert format_int(255, 16) == "ff"


def test_format_int_negative_sign():
    assert format_int(-5, 10).startswith("-")


def test_format_int_bad_radix():
    with pytest.raises(ValueError):
        format_int(5, 1)


def test_format_message_plain():
    assert format_message("[Mark set]") == "[Mark set]"


def test_format_message_ints():
    assert format_message("[read %d lines (%d bytes)]", 3, 40) == "[read 3 lines (40 bytes)]"


def test_format_message_radixes():
    result = format_message("%x/%o", 255, 8)
    hex_part, oct_part = result.split("/")
    assert int(hex_part, 16) == 255
    assert int(oct_part, 8) == 8


def test_format_message_string_and_unknown():
    assert format_message("Error: %s %%", "nope") == "Error: nope %"


def test_format_message_missing_argument():
    with pytest.raises(ValueError):
        format_message("%d and %d", 1)


def test_expand_simple_escapes():
    assert expand_escapes("a\\nb\\tc\\\\") == "a\nb\tc\\"
    assert expand_escapes("\\e") == "\x1b"


def test_expand_octal_and_hex():
    assert expand_escapes("\\101") == chr(0o101)
    assert expand_escapes("\\x4a") == chr(0x4A)


def test_expand_unknown_escape_keeps_char():
    assert expand_escapes("\\q") == "q"


def test_expand_plain_text_unchanged():
    assert expand_escapes("hello world") == "hello world"


@pytest.mark.parametrize("bad", ["\\19x", "\\x4g", "\\xAB", "\\1", "abc\\"])
def test_expand_bad_escapes(bad):
    with pytest.raises(ValueError):
        expand_escapes(bad)


def test_reply_basic():
    reply = read_reply("abc\r", 16)
    assert reply.text == "abc"
    assert reply.echo == "abc"
    assert not reply.escaped


def test_reply_newline_ends():
    assert read_reply("xy\nzz", 16).text == "xy"


def test_reply_escape_flag():
    reply = read_reply("ab\x1b", 16)
    assert reply.text == "ab"
    assert reply.escaped


def test_reply_limit():
    assert read_reply("abcdef\r", 3).text == "ab"


def test_reply_backspace_and_rubout():
    assert read_reply("abc\x08d\x7f\x7fe\r", 16).text == "ae"


def test_reply_kill():
    reply = read_reply("abc\x15xy\r", 16)
    assert reply.text == "xy"
    assert reply.echo == "xy"


def test_reply_abort():
    with pytest.raises(ReplyAborted):
        read_reply("ab\x07", 16)


def test_reply_password_masked():
    reply = read_reply("secret\r", 16, True)
    assert reply.text == "secret"
    assert reply.echo == "*" * len("secret")


def test_reply_quoted_control_char():
    reply = read_reply(["\x11", 0x0D, "\r"], 16)
    assert reply.text == "\r"
    assert reply.echo == "^M"


def test_reply_control_char_erase_removes_caret():
    reply = read_reply("a\x01\x08\r", 16)
    assert reply.text == "a"
    assert reply.echo == "a"


def test_reply_unterminated():
    with pytest.raises(EOFError):
        read_reply("abc", 16)