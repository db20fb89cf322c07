import base64
import hashlib
import json
import secrets
import struct
import unittest.mock

import cbor2
import cryptography.hazmat.primitives.asymmetric.ec
import cryptography.hazmat.primitives.hashes


def b64url(value: bytes) -> str:
	return base64.urlsafe_b64encode(value).decode("ascii").rstrip("=")


def make_app():
	"""
	Mock application with a service registry, enough to construct services in isolation
	"""
	services = {}
	app = unittest.mock.MagicMock()
	app.get_service.side_effect = lambda name: services.get(name)
	return app, services


class VirtualAuthenticator:
	"""
	Software platform authenticator with an ES256 key and "none" attestation
	"""

	FLAG_UP = 0x01
	FLAG_UV = 0x04
	FLAG_AT = 0x40

	def __init__(self, rp_id="localhost", origin="http://localhost:3000", credential_id=None):
		self.RpId = rp_id
		self.Origin = origin
		self.CredentialId = credential_id or secrets.token_bytes(16)
		self.PrivateKey = cryptography.hazmat.primitives.asymmetric.ec.generate_private_key(
			cryptography.hazmat.primitives.asymmetric.ec.SECP256R1())
		self.SignCount = 0


	def cose_public_key(self) -> bytes:
		numbers = self.PrivateKey.public_key().public_numbers()
		return cbor2.dumps({
			1: 2,  # kty: EC2
			3: -7,  # alg: ES256
			-1: 1,  # crv: P-256
			-2: numbers.x.to_bytes(32, "big"),
			-3: numbers.y.to_bytes(32, "big"),
		})


	def authenticator_data(self, flags=FLAG_UP | FLAG_UV, attested=False, rp_id=None) -> bytes:
		rp_id_hash = hashlib.sha256((rp_id or self.RpId).encode("utf-8")).digest()
		if attested:
			flags |= self.FLAG_AT
		data = rp_id_hash + bytes([flags]) + struct.pack(">I", self.SignCount)
		if attested:
			data += bytes(16)  # AAGUID
			data += struct.pack(">H", len(self.CredentialId)) + self.CredentialId
			data += self.cose_public_key()
		return data


	def create(self, challenge: str, *, origin=None, type="webauthn.create", raw_id=None, flags=FLAG_UP | FLAG_UV) -> dict:
		"""
		Build a registration response (navigator.credentials.create)
		"""
		client_data = json.dumps({
			"type": type,
			"challenge": challenge,
			"origin": origin or self.Origin,
			"crossOrigin": False,
		}).encode("utf-8")
		attestation_object = cbor2.dumps({
			"fmt": "none",
			"attStmt": {},
			"authData": self.authenticator_data(flags, attested=True),
		})
		return {
			"id": b64url(self.CredentialId),
			"rawId": b64url(raw_id or self.CredentialId),
			"type": "public-key",
			"response": {
				"clientDataJSON": b64url(client_data),
				"attestationObject": b64url(attestation_object),
			},
		}


	def get(self, challenge: str, *, origin=None, type="webauthn.get", sign_count=None, flags=FLAG_UP | FLAG_UV, signing_key=None) -> dict:
		"""
		Build an authentication assertion (navigator.credentials.get)
		"""
		if sign_count is None:
			self.SignCount += 1
		else:
			self.SignCount = sign_count

		authenticator_data = self.authenticator_data(flags)
		client_data = json.dumps({
			"type": type,
			"challenge": challenge,
			"origin": origin or self.Origin,
			"crossOrigin": False,
		}).encode("utf-8")
		signature = (signing_key or self.PrivateKey).sign(
			authenticator_data + hashlib.sha256(client_data).digest(),
			cryptography.hazmat.primitives.asymmetric.ec.ECDSA(cryptography.hazmat.primitives.hashes.SHA256()),
		)
		return {
			"id": b64url(self.CredentialId),
			"rawId": b64url(self.CredentialId),
			"type": "public-key",
			"response": {
				"clientDataJSON": b64url(client_data),
				"authenticatorData": b64url(authenticator_data),
				"signature": b64url(signature),
				"userHandle": None,
			},
		}
