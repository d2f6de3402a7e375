"""Conversation encryption and emoji helpers.

Messages are encrypted with AES-256-CBC (PKCS7 padding, random 16-byte IV)
under the conversation key and serialized as ``"<iv hex>:<cipher hex>"``.
Astral-plane characters (emoji and anything else UTF-16 encodes as a surrogate
pair) are stripped before encryption and carried beside the cipher-text with
their index in the original string, then spliced back after decryption.

Known-weak scheme: the key is handed to both participants in plaintext API
responses. There is no key exchange; do not treat this as end-to-end
encryption.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

KEY_BYTES = 32
IV_BYTES = 16
_BLOCK_BITS = algorithms.AES.block_size
_ASTRAL_START = 0x10000


class InvalidCiphertext(ValueError):
	"""Raised when content cannot be decrypted with the given key."""


@dataclass(slots=True, frozen=True)
class EmojiRef:
	emoji: str
	index: int

	def to_dict(self) -> dict:
		return {"emoji": self.emoji, "index": self.index}


@dataclass(slots=True, frozen=True)
class SealedText:
	content: str
	emojis: Tuple[EmojiRef, ...] = field(default_factory=tuple)
	just_emojis: bool = False


def generate_key() -> str:
	"""Return a fresh conversation key: 32 random bytes, hex encoded."""
	return secrets.token_hex(KEY_BYTES)


def _key_bytes(key: str) -> bytes:
	try:
		raw = bytes.fromhex(key)
	except ValueError:
		raise InvalidCiphertext("key is not hex") from None
	if len(raw) != KEY_BYTES:
		raise InvalidCiphertext("key must be 32 bytes")
	return raw


def encrypt_text(text: str, key: str) -> str:
	iv = secrets.token_bytes(IV_BYTES)
	padder = padding.PKCS7(_BLOCK_BITS).padder()
	padded = padder.update(text.encode("utf-8")) + padder.finalize()
	encryptor = Cipher(algorithms.AES(_key_bytes(key)), modes.CBC(iv)).encryptor()
	cipher = encryptor.update(padded) + encryptor.finalize()
	return f"{iv.hex()}:{cipher.hex()}"


def decrypt_text(content: str, key: str) -> str:
	iv_hex, sep, cipher_hex = content.partition(":")
	if not sep:
		raise InvalidCiphertext("missing iv separator")
	try:
		iv = bytes.fromhex(iv_hex)
		cipher = bytes.fromhex(cipher_hex)
	except ValueError:
		raise InvalidCiphertext("content is not hex") from None
	if len(iv) != IV_BYTES or not cipher or len(cipher) % IV_BYTES:
		raise InvalidCiphertext("malformed cipher-text")
	decryptor = Cipher(algorithms.AES(_key_bytes(key)), modes.CBC(iv)).decryptor()
	padded = decryptor.update(cipher) + decryptor.finalize()
	unpadder = padding.PKCS7(_BLOCK_BITS).unpadder()
	try:
		plain = unpadder.update(padded) + unpadder.finalize()
		return plain.decode("utf-8")
	except ValueError:
		# bad padding or invalid utf-8 both mean the wrong key or corrupted content
		raise InvalidCiphertext("cannot decrypt content") from None


def is_astral(char: str) -> bool:
	return ord(char) >= _ASTRAL_START


def extract_emojis(text: str) -> Tuple[str, List[EmojiRef]]:
	"""Split text into its BMP remainder and the astral characters with their indices."""
	kept: List[str] = []
	emojis: List[EmojiRef] = []
	for index, char in enumerate(text):
		if is_astral(char):
			emojis.append(EmojiRef(emoji=char, index=index))
		else:
			kept.append(char)
	return "".join(kept), emojis


def splice_emojis(text: str, emojis: Iterable[EmojiRef]) -> str:
	"""Re-insert extracted characters; ascending order keeps every index valid."""
	chars = list(text)
	for ref in sorted(emojis, key=lambda item: item.index):
		chars.insert(ref.index, ref.emoji)
	return "".join(chars)


def is_only_emojis(text: str) -> bool:
	return bool(text) and all(is_astral(char) for char in text)


def seal(text: str, key: str) -> SealedText:
	cleaned, emojis = extract_emojis(text)
	# emoji-only messages carry no cipher-text at all
	content = encrypt_text(cleaned, key) if cleaned else ""
	return SealedText(content=content, emojis=tuple(emojis), just_emojis=is_only_emojis(text))


def unseal(sealed: SealedText, key: str) -> str:
	cleaned = decrypt_text(sealed.content, key) if sealed.content else ""
	return splice_emojis(cleaned, sealed.emojis)
