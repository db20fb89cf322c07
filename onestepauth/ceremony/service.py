import hashlib
import json
import logging
import re
import typing
import urllib.parse
import uuid

import asab
import asab.exceptions
import cryptography.exceptions
import webauthn
import webauthn.helpers
import webauthn.helpers.structs

from .outcome import CeremonyOutcome, LoginMethod
from ..audit import AuditCode, RiskLevel
from ..challenge import ChallengePurpose
from ..registry import Credential, DeviceClass
from .. import exceptions, generic

#

L = logging.getLogger(__name__)

#


asab.Config.add_defaults({
	"onestepauth:webauthn": {
		"origin": "http://localhost:3000",

		# RP ID must match the host's domain name (without scheme, port or subpath)
		# Derived from the origin if empty
		"relying_party_id": "",
		"relying_party_name": "OneStep",

		# Accept only the exact configured origin.
		# With "no", origins from `allowed_origins` are also accepted (development only).
		"strict_origin": "yes",
		"allowed_origins": "",
	}
})


class CeremonyService(asab.Service):
	"""
	WebAuthn registration and authentication ceremonies

	https://www.w3.org/TR/webauthn/#sctn-registering-a-new-credential
	https://www.w3.org/TR/webauthn/#sctn-verifying-assertion
	"""

	def __init__(self, app, service_name="onestepauth.CeremonyService"):
		super().__init__(app, service_name)
		self.ChallengeService = app.get_service("onestepauth.ChallengeService")
		self.RegistryService = app.get_service("onestepauth.RegistryService")
		self.AuditService = app.get_service("onestepauth.AuditService")
		self.MetricsService = app.get_service("asab.MetricsService")

		self.Origin = asab.Config.get("onestepauth:webauthn", "origin").rstrip("/")
		self.RelyingPartyName = asab.Config.get("onestepauth:webauthn", "relying_party_name")
		self.RelyingPartyId = asab.Config.get("onestepauth:webauthn", "relying_party_id")
		if not self.RelyingPartyId:
			self.RelyingPartyId = str(urllib.parse.urlparse(self.Origin).hostname)

		self.StrictOrigin = asab.Config.getboolean("onestepauth:webauthn", "strict_origin")
		self.AllowedOrigins = frozenset(
			origin.rstrip("/")
			for origin in re.split(r"[\s,]+", asab.Config.get("onestepauth:webauthn", "allowed_origins"))
			if len(origin) > 0
		)
		if not self.StrictOrigin:
			L.warning("Strict WebAuthn origin check is disabled", struct_data={
				"origin": self.Origin,
				"allowed": " ".join(sorted(self.AllowedOrigins)),
			})

		self.Timeout = int(self.ChallengeService.ChallengeTimeout.total_seconds() * 1000)
		self.SupportedAlgorithms = [
			webauthn.helpers.structs.COSEAlgorithmIdentifier.ECDSA_SHA_256,
			webauthn.helpers.structs.COSEAlgorithmIdentifier.EDDSA,
			webauthn.helpers.structs.COSEAlgorithmIdentifier.RSASSA_PKCS1_v1_5_SHA_256,
		]

		self.CeremonyCounter = self.MetricsService.create_counter(
			"webauthn_ceremonies",
			tags={"help": "Counts verified and rejected WebAuthn ceremonies.", "unit": "epm"},
			init_values={"verified": 0, "rejected": 0}
		)


	async def get_registration_options(self, owner_id: str, device_hint: typing.Optional[str] = None) -> dict:
		"""
		Issue a registration challenge and build the credential creation options

		https://www.w3.org/TR/webauthn/#dictdef-publickeycredentialcreationoptions
		"""
		challenge = await self.ChallengeService.issue(owner_id, ChallengePurpose.REGISTER)
		credentials = await self.RegistryService.find_active_by_owner(owner_id)

		options = webauthn.generate_registration_options(
			rp_id=self.RelyingPartyId,
			rp_name=self.RelyingPartyName,
			user_id=owner_id.encode("utf-8"),
			user_name=owner_id,
			challenge=challenge.Nonce,
			timeout=self.Timeout,
			attestation=webauthn.helpers.structs.AttestationConveyancePreference.NONE,
			authenticator_selection=webauthn.helpers.structs.AuthenticatorSelectionCriteria(
				authenticator_attachment=webauthn.helpers.structs.AuthenticatorAttachment.PLATFORM,
				user_verification=webauthn.helpers.structs.UserVerificationRequirement.PREFERRED,
			),
			exclude_credentials=[
				webauthn.helpers.structs.PublicKeyCredentialDescriptor(id=credential.CredentialId)
				for credential in credentials
			],
			supported_pub_key_algs=self.SupportedAlgorithms,
		)
		options = json.loads(webauthn.options_to_json(options))
		options["expires_at"] = challenge.ExpiresAt.isoformat()
		if device_hint is not None:
			options["device_hint"] = device_hint
		return options


	async def get_authentication_options(self, owner_id: str) -> dict:
		"""
		Issue an authentication challenge and build the credential request options

		https://www.w3.org/TR/webauthn/#dictdef-publickeycredentialrequestoptions
		"""
		challenge = await self.ChallengeService.issue(owner_id, ChallengePurpose.AUTHENTICATE)
		credentials = await self.RegistryService.find_active_by_owner(owner_id)

		options = webauthn.generate_authentication_options(
			rp_id=self.RelyingPartyId,
			challenge=challenge.Nonce,
			timeout=self.Timeout,
			allow_credentials=[
				webauthn.helpers.structs.PublicKeyCredentialDescriptor(id=credential.CredentialId)
				for credential in credentials
			],
			user_verification=webauthn.helpers.structs.UserVerificationRequirement.PREFERRED,
		)
		options = json.loads(webauthn.options_to_json(options))
		options["expires_at"] = challenge.ExpiresAt.isoformat()
		return options


	async def complete_registration(
		self,
		owner_id: str,
		public_key_credential: dict,
		user_agent: typing.Optional[str] = None,
		device_hint: typing.Optional[str] = None,
	) -> CeremonyOutcome:
		"""
		Verify the registration response and store the new credential
		"""
		try:
			credential = await self._register(owner_id, public_key_credential, user_agent, device_hint)

		except exceptions.DuplicateCredentialError as e:
			await self.AuditService.log_security_event(
				AuditCode.WEBAUTHN_DUPLICATE_CREDENTIAL, RiskLevel.HIGH,
				owner_id=owner_id, wacid=e.CredentialId.hex())
			return self._rejected(e, owner_id, "registration")

		except exceptions.RegistrationLimitExceededError as e:
			await self.AuditService.log_security_event(
				AuditCode.WEBAUTHN_REGISTRATION_LIMIT_EXCEEDED, RiskLevel.MEDIUM,
				owner_id=owner_id, limit=e.Limit)
			return self._rejected(e, owner_id, "registration")

		except (exceptions.ChallengeError, exceptions.CeremonyError) as e:
			await self.AuditService.log_security_event(
				AuditCode.WEBAUTHN_REGISTRATION_FAILED, RiskLevel.LOW,
				owner_id=owner_id, reason=e.Code)
			return self._rejected(e, owner_id, "registration")

		await self.AuditService.log_security_event(
			AuditCode.WEBAUTHN_CREDENTIAL_REGISTERED, RiskLevel.LOW,
			owner_id=owner_id, wacid=credential.CredentialId.hex(), dc=str(credential.DeviceClass))
		self.CeremonyCounter.add("verified", 1)
		return CeremonyOutcome.verified(owner_id, credential_id=credential.CredentialId)


	async def complete_authentication(self, owner_id: str, public_key_credential: dict) -> CeremonyOutcome:
		"""
		Verify the authentication assertion.

		On success, the owner is handed over to the session issuer
		through the "OneStep.authenticated!" PubSub message.
		"""
		try:
			credential = await self._authenticate(owner_id, public_key_credential)

		except exceptions.CounterRegressionError as e:
			await self.RegistryService.flag_for_review(e.CredentialId)
			await self.AuditService.log_security_event(
				AuditCode.WEBAUTHN_COUNTER_REGRESSION, RiskLevel.CRITICAL,
				owner_id=owner_id,
				wacid=e.CredentialId.hex(),
				stored_sc=e.StoredCounter,
				presented_sc=e.PresentedCounter,
			)
			return self._rejected(e, owner_id, "authentication")

		except (exceptions.ChallengeError, exceptions.CeremonyError) as e:
			await self.AuditService.log_security_event(
				AuditCode.LOGIN_FAILED, RiskLevel.LOW,
				owner_id=owner_id, reason=e.Code, lm=str(LoginMethod.WEBAUTHN))
			return self._rejected(e, owner_id, "authentication")

		await self.AuditService.log_security_event(
			AuditCode.LOGIN_SUCCESS, RiskLevel.LOW,
			owner_id=owner_id, wacid=credential.CredentialId.hex(), lm=str(LoginMethod.WEBAUTHN))
		self.CeremonyCounter.add("verified", 1)
		self.App.PubSub.publish(
			"OneStep.authenticated!",
			owner_id=owner_id,
			login_method=str(LoginMethod.WEBAUTHN),
		)
		return CeremonyOutcome.verified(owner_id, LoginMethod.WEBAUTHN, credential.CredentialId)


	def _rejected(self, error: exceptions.OneStepAuthError, owner_id: str, ceremony: str) -> CeremonyOutcome:
		self.CeremonyCounter.add("rejected", 1)
		L.log(asab.LOG_NOTICE, "WebAuthn {} rejected".format(ceremony), struct_data={
			"oid": owner_id,
			"reason": error.Code,
			"detail": str(error),
		})
		if isinstance(error, (exceptions.DuplicateCredentialError, exceptions.ChallengeError, exceptions.CeremonyError)):
			# Generic text only, the detail may describe other owners' data
			return CeremonyOutcome.rejected(error.Code)
		return CeremonyOutcome.rejected(error.Code, str(error))


	async def _register(self, owner_id, public_key_credential, user_agent, device_hint) -> Credential:
		client_data_json, client_data, nonce = await self._receive_response(
			owner_id, ChallengePurpose.REGISTER, public_key_credential)

		if client_data.get("type") != "webauthn.create":
			raise exceptions.ClientDataTypeMismatchError("webauthn.create", client_data.get("type"))
		self._verify_origin(client_data.get("origin"))

		active_credentials = await self.RegistryService.find_active_by_owner(owner_id)
		if len(active_credentials) >= self.RegistryService.MaxCredentials:
			raise exceptions.RegistrationLimitExceededError(owner_id, self.RegistryService.MaxCredentials)

		raw_id = _decode_field(public_key_credential, "rawId")
		response = public_key_credential["response"]
		attestation_object = _decode_field(response, "attestationObject")
		try:
			attestation = webauthn.helpers.parse_attestation_object(attestation_object)
		except Exception as e:
			raise exceptions.MalformedResponseError("Cannot decode attestation object") from e

		auth_data = attestation.auth_data
		self._verify_authenticator_data(auth_data)

		attested = auth_data.attested_credential_data
		if attested is None:
			raise exceptions.MalformedResponseError("Attestation contains no credential data")
		if attested.credential_id != raw_id:
			raise exceptions.MalformedResponseError("Attested credential ID does not match rawId")

		self._decode_public_key(attested.credential_public_key)

		if device_hint in list(DeviceClass):
			device_class = DeviceClass(device_hint)
		else:
			device_class = DeviceClass.from_user_agent(user_agent)

		return await self.RegistryService.register(
			owner_id,
			attested.credential_id,
			attested.credential_public_key,
			device_class=device_class,
			aaguid=str(uuid.UUID(bytes=bytes(attested.aaguid))) if attested.aaguid else None,
		)


	async def _authenticate(self, owner_id, public_key_credential) -> Credential:
		client_data_json, client_data, nonce = await self._receive_response(
			owner_id, ChallengePurpose.AUTHENTICATE, public_key_credential)

		if client_data.get("type") != "webauthn.get":
			raise exceptions.ClientDataTypeMismatchError("webauthn.get", client_data.get("type"))
		self._verify_origin(client_data.get("origin"))

		credential_id = _decode_field(public_key_credential, "rawId")
		credential = await self.RegistryService.find_by_credential_id(credential_id)
		if credential is None or credential.OwnerId != owner_id:
			raise exceptions.UnknownCredentialError(credential_id)
		if not credential.Active:
			raise exceptions.InactiveCredentialError(credential_id)

		response = public_key_credential["response"]
		authenticator_data = _decode_field(response, "authenticatorData")
		signature = _decode_field(response, "signature")
		try:
			auth_data = webauthn.helpers.parse_authenticator_data(authenticator_data)
		except Exception as e:
			raise exceptions.MalformedResponseError("Cannot decode authenticator data") from e
		self._verify_authenticator_data(auth_data)

		decoded_public_key, public_key = self._decode_public_key(credential.PublicKey)
		signature_base = authenticator_data + hashlib.sha256(client_data_json).digest()
		try:
			webauthn.helpers.verify_signature(
				public_key=public_key,
				signature_alg=decoded_public_key.alg,
				signature=signature,
				data=signature_base,
			)
		except cryptography.exceptions.InvalidSignature as e:
			raise exceptions.SignatureInvalidError(credential_id) from e

		return await self.RegistryService.record_successful_assertion(credential_id, auth_data.sign_count)


	async def _receive_response(self, owner_id: str, purpose: ChallengePurpose, public_key_credential: dict):
		"""
		Decode the client data and consume the challenge it answers.

		A response that cannot be decoded still burns the challenge.
		"""
		try:
			if not isinstance(public_key_credential, dict) or not isinstance(public_key_credential.get("response"), dict):
				raise exceptions.MalformedResponseError("Missing 'response'")
			client_data_json = _decode_field(public_key_credential["response"], "clientDataJSON")
			try:
				client_data = json.loads(client_data_json)
			except (UnicodeDecodeError, json.JSONDecodeError) as e:
				raise exceptions.MalformedResponseError("Client data is not valid JSON") from e
			if not isinstance(client_data, dict):
				raise exceptions.MalformedResponseError("Client data is not a JSON object")
			nonce = _decode_field(client_data, "challenge")
		except exceptions.MalformedResponseError:
			await self.ChallengeService.discard(owner_id, purpose)
			raise

		await self.ChallengeService.consume(owner_id, purpose, nonce)
		return client_data_json, client_data, nonce


	def _verify_origin(self, origin):
		if origin == self.Origin:
			return
		if not self.StrictOrigin and origin in self.AllowedOrigins:
			L.warning("WebAuthn response from a non-primary origin accepted", struct_data={
				"origin": origin,
				"expected": self.Origin,
			})
			return
		raise exceptions.OriginMismatchError(self.Origin, origin)


	def _verify_authenticator_data(self, auth_data):
		expected_rp_id_hash = hashlib.sha256(self.RelyingPartyId.encode("utf-8")).digest()
		if auth_data.rp_id_hash != expected_rp_id_hash:
			raise exceptions.OriginMismatchError(self.RelyingPartyId, "RP ID hash")
		if not auth_data.flags.up:
			raise exceptions.MalformedResponseError("User presence flag is not set")


	def _decode_public_key(self, public_key: bytes):
		"""
		Raises MalformedResponseError for a key that cannot be decoded or built (e.g. a point off the curve)
		"""
		try:
			decoded = webauthn.helpers.decode_credential_public_key(public_key)
		except Exception as e:
			raise exceptions.MalformedResponseError("Cannot decode credential public key") from e
		if decoded.alg not in self.SupportedAlgorithms:
			raise exceptions.MalformedResponseError("Unsupported public key algorithm: {}".format(decoded.alg))
		try:
			key = webauthn.helpers.decoded_public_key_to_cryptography(decoded)
		except Exception as e:
			raise exceptions.MalformedResponseError("Invalid credential public key") from e
		return decoded, key


def _decode_field(container: dict, name: str) -> bytes:
	value = container.get(name)
	if not isinstance(value, str):
		raise exceptions.MalformedResponseError("Missing {!r}".format(name))
	try:
		return generic.b64url_decode(value)
	except asab.exceptions.ValidationError as e:
		raise exceptions.MalformedResponseError("Invalid {!r}".format(name)) from e
