import base64
import binascii
import logging

import aiohttp.hdrs
import argon2
import asab.exceptions

#

L = logging.getLogger(__name__)

#


def b64url_encode(value: bytes) -> str:
	"""
	Encode bytes as unpadded base64url, the WebAuthn wire format
	"""
	return base64.urlsafe_b64encode(value).decode("ascii").rstrip("=")


def b64url_decode(value: str | bytes) -> bytes:
	"""
	Decode unpadded (or padded) base64url.

	Raises asab.exceptions.ValidationError on malformed input.
	"""
	if isinstance(value, bytes):
		value = value.decode("ascii", errors="replace")
	if not isinstance(value, str):
		raise asab.exceptions.ValidationError("Expected a base64url string, got {}".format(type(value).__name__))
	value = value.strip().rstrip("=")
	try:
		return base64.urlsafe_b64decode(value + "=" * (-len(value) % 4))
	except (binascii.Error, ValueError) as e:
		raise asab.exceptions.ValidationError("Invalid base64url value") from e


def argon2_hash(secret: bytes | str) -> str:
	return argon2.PasswordHasher().hash(secret)


def argon2_verify(hash: bytes | str, secret: bytes | str) -> bool:
	try:
		return argon2.PasswordHasher().verify(hash, secret)
	except argon2.exceptions.VerifyMismatchError:
		return False


def get_bearer_token_value(request) -> str | None:
	bearer_prefix = "Bearer "
	auth_header = request.headers.get(aiohttp.hdrs.AUTHORIZATION, None)
	if auth_header is None:
		return None
	if auth_header.startswith(bearer_prefix):
		return auth_header[len(bearer_prefix):]

	L.info("No Bearer token in Authorization header")
	return None
