import pytest

from medit.blowfish import Blowfish, _init_key


def test_init_key_matches_table_endpoints():
    table = _init_key()
    assert len(table) == 1042
    assert table[0] == 0x243F6A88
    assert table[17] == 0x8979FB1B
    assert table[18] == 0xD1310BA6
    assert table[274] == 0x4B7A70E9
    assert table[530] == 0xE93D5A68
    assert table[786] == 0x3A39CE37
    assert table[-1] == 0x3AC372E6


def test_zero_key_zero_block_vector():
    cipher = Blowfish(bytes(8))
    assert cipher.encrypt_block(bytes(8)) == bytes.fromhex("4EF997456198DD78")


def test_all_ones_vector():
    cipher = Blowfish(b"\xff" * 8)
    assert cipher.encrypt_block(b"\xff" * 8) == bytes.fromhex("51866FD5B85ECB8A")


def test_known_key_vector():
    cipher = Blowfish(bytes.fromhex("FEDCBA9876543210"))
    result = cipher.encrypt_block(bytes.fromhex("0123456789ABCDEF"))
    assert result == bytes.fromhex("0ACEAB0FC6A0A28D")


@pytest.mark.parametrize(
    "key",
    [b"k", b"secret", b"a much longer key that wraps around the p array" * 2],
)
@pytest.mark.parametrize(
    "block", [bytes(8), b"\xff" * 8, b"abcdefgh", bytes(range(8))]
)
def test_round_trip(key, block):
    cipher = Blowfish(key)
    encrypted = cipher.encrypt_block(block)
    assert len(encrypted) == 8
    assert encrypted != block
    assert cipher.decrypt_block(encrypted) == block


def test_decrypt_then_encrypt_is_identity():
    cipher = Blowfish(b"password")
    block = b"12345678"
    assert cipher.encrypt_block(cipher.decrypt_block(block)) == block


def test_empty_key_equals_single_zero_byte():
    assert Blowfish(b"").encrypt_block(b"abcdefgh") == Blowfish(
        b"\x00"
    ).encrypt_block(b"abcdefgh")


def test_key_cycles_over_its_length():
    assert Blowfish(b"ab").encrypt_block(b"abcdefgh") == Blowfish(
        b"abab"
    ).encrypt_block(b"abcdefgh")


def test_str_key_is_utf8_bytes():
    assert Blowfish("secret").encrypt_block(b"abcdefgh") == Blowfish(
        b"secret"
    ).encrypt_block(b"abcdefgh")


def test_different_keys_give_different_output():
    block = b"abcdefgh"
    assert Blowfish(b"one").encrypt_block(block) != Blowfish(b"two").encrypt_block(
        block
    )


def test_accepts_bytearray_block():
    cipher = Blowfish(b"token")
    block = bytearray(b"zyxwvuts")
    assert cipher.decrypt_block(cipher.encrypt_block(block)) == bytes(block)


@pytest.mark.parametrize("length", [0, 7, 9, 16])
def test_wrong_block_length_raises(length):
    cipher = Blowfish(b"placeholder")
    with pytest.raises(ValueError):
        cipher.encrypt_block(bytes(length))
    with pytest.raises(ValueError):
        cipher.decrypt_block(bytes(length))