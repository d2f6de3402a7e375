import pytest

from hive.domain.chat import crypto
from hive.domain.chat.crypto import EmojiRef, InvalidCiphertext


def test_generate_key_is_32_bytes_hex():
    key = crypto.generate_key()
    assert len(key) == 64
    assert len(bytes.fromhex(key)) == 32
    assert crypto.generate_key() != key


def test_encrypt_round_trip_uses_iv_prefix():
    key = crypto.generate_key()
    content = crypto.encrypt_text("see you at 8", key)
    iv_hex, _, cipher_hex = content.partition(":")
    assert len(bytes.fromhex(iv_hex)) == 16
    assert len(bytes.fromhex(cipher_hex)) % 16 == 0
    assert crypto.decrypt_text(content, key) == "see you at 8"


def test_encrypt_uses_a_fresh_iv_each_time():
    key = crypto.generate_key()
    assert crypto.encrypt_text("same", key) != crypto.encrypt_text("same", key)


def test_decrypt_with_wrong_key_fails():
    content = crypto.encrypt_text("a private note", crypto.generate_key())
    with pytest.raises(InvalidCiphertext):
        crypto.decrypt_text(content, crypto.generate_key())


@pytest.mark.parametrize("content", ["no-separator", "zz:zz", "00ff:", "0011:00112233"])
def test_decrypt_rejects_malformed_content(content):
    with pytest.raises(InvalidCiphertext):
        crypto.decrypt_text(content, crypto.generate_key())


def test_bad_key_is_rejected():
    with pytest.raises(InvalidCiphertext):
        crypto.encrypt_text("hi", "abcd")


def test_seal_strips_emoji_before_encrypting():
    key = crypto.generate_key()
    sealed = crypto.seal("hello 👋", key)

    assert sealed.emojis == (EmojiRef(emoji="👋", index=6),)
    assert sealed.just_emojis is False
    assert crypto.decrypt_text(sealed.content, key) == "hello "
    assert crypto.unseal(sealed, key) == "hello 👋"


def test_seal_emoji_only_message_has_no_ciphertext():
    key = crypto.generate_key()
    sealed = crypto.seal("👋🎉", key)

    assert sealed.content == ""
    assert sealed.just_emojis is True
    assert [ref.index for ref in sealed.emojis] == [0, 1]
    assert crypto.unseal(sealed, key) == "👋🎉"


def test_extract_and_splice_interleaved_emoji():
    cleaned, emojis = crypto.extract_emojis("a👋b🎉c")
    assert cleaned == "abc"
    assert [(ref.emoji, ref.index) for ref in emojis] == [("👋", 1), ("🎉", 3)]
    # insertion order must not matter
    assert crypto.splice_emojis(cleaned, reversed(emojis)) == "a👋b🎉c"


def test_bmp_symbols_stay_in_the_ciphertext():
    key = crypto.generate_key()
    sealed = crypto.seal("café ✓", key)
    assert sealed.emojis == ()
    assert crypto.decrypt_text(sealed.content, key) == "café ✓"


def test_just_emojis_flag_follows_is_only_emojis():
    key = crypto.generate_key()
    assert crypto.is_only_emojis("🎉🎉")
    assert not crypto.is_only_emojis("🎉 ")
    assert not crypto.is_only_emojis("")
    assert crypto.seal("🎉 ", key).just_emojis is False
    assert crypto.seal("", key).just_emojis is False
