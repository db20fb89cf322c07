import re
import typing

import asab.exceptions
import webauthn.helpers
import webauthn.helpers.exceptions

from ..codes import CheckResult, CheckType
from ..verdict import RiskVerdict
from ... import generic


SUSPICIOUS_USER_AGENT_RE = re.compile(r"bot|crawler|spider|scraper|headless|phantom|selenium", re.IGNORECASE)


def check_device_trust(device: dict, context: typing.Optional[dict] = None) -> RiskVerdict:
	"""
	Input: `fingerprint`, `user_agent`, `ip_address`
	Context: `known_devices`, a list of `{"fingerprint": ..., "trusted": bool}`
	"""
	context = context or {}
	fingerprint = device.get("fingerprint")
	user_agent = device.get("user_agent") or ""

	result = CheckResult.WARNING
	score = 50
	reasons = []
	metadata = {"known": False}

	for known_device in context.get("known_devices") or []:
		if known_device.get("fingerprint") == fingerprint:
			metadata["known"] = True
			if known_device.get("trusted"):
				result = CheckResult.PASS
				score = 90
			else:
				score = 30
				reasons.append("Device is not trusted yet")
			break

	if SUSPICIOUS_USER_AGENT_RE.search(user_agent) is not None:
		return RiskVerdict(
			Check=CheckType.DEVICE_TRUST,
			Result=CheckResult.FAIL,
			Score=0,
			Reasons=["Suspicious browser detected"],
			Metadata=metadata,
		)

	if len(user_agent) < 20 or "Mozilla" not in user_agent:
		score -= 20
		reasons.append("Unusual browser signature")

	return RiskVerdict(
		Check=CheckType.DEVICE_TRUST,
		Result=result,
		Score=score,
		Reasons=reasons,
		Metadata=metadata,
	)


def check_device_fingerprint(fingerprint, context: typing.Optional[dict] = None) -> RiskVerdict:
	"""
	Context: `trusted_fingerprints`, a list of fingerprints
	"""
	context = context or {}
	if fingerprint in (context.get("trusted_fingerprints") or []):
		return RiskVerdict(
			Check=CheckType.DEVICE_FINGERPRINT,
			Result=CheckResult.PASS,
			Score=95,
		)
	return RiskVerdict(
		Check=CheckType.DEVICE_FINGERPRINT,
		Result=CheckResult.WARNING,
		Score=50,
		Reasons=["New device detected - please verify"],
	)


def check_biometric_quality(biometric: dict, context: typing.Optional[dict] = None) -> RiskVerdict:
	"""
	Score the completeness of a biometric credential.

	Input: `credential_id`, `public_key` and `authenticator_data`, all base64url-encoded.
	The authenticator data flags must report user presence; missing user verification lowers the score.
	"""
	score = 0
	reasons = []
	metadata = {}

	if biometric.get("credential_id"):
		score += 30
	else:
		reasons.append("Credential ID is missing")

	if biometric.get("public_key"):
		score += 40
	else:
		reasons.append("Public key is missing")

	authenticator_data = biometric.get("authenticator_data")
	if authenticator_data:
		try:
			auth_data = webauthn.helpers.parse_authenticator_data(generic.b64url_decode(authenticator_data))
		except (
			asab.exceptions.ValidationError,
			webauthn.helpers.exceptions.InvalidAuthenticatorDataStructure,
			webauthn.helpers.exceptions.InvalidCBORData,
		):
			auth_data = None
			reasons.append("Authenticator data could not be decoded")

		if auth_data is not None:
			score += 30
			metadata["user_present"] = auth_data.flags.up
			metadata["user_verified"] = auth_data.flags.uv
			metadata["sign_count"] = auth_data.sign_count

			if not auth_data.flags.up:
				return RiskVerdict(
					Check=CheckType.BIOMETRIC_QUALITY,
					Result=CheckResult.FAIL,
					Score=0,
					Reasons=["User presence was not confirmed by the authenticator"],
					Metadata=metadata,
				)

			if not auth_data.flags.uv:
				score -= 20
				reasons.append("Enable biometric user verification on the device")
	else:
		reasons.append("Authenticator data is missing")

	if score >= 80:
		result = CheckResult.PASS
	elif score >= 60:
		result = CheckResult.WARNING
	else:
		result = CheckResult.FAIL

	return RiskVerdict(
		Check=CheckType.BIOMETRIC_QUALITY,
		Result=result,
		Score=score,
		Reasons=reasons,
		Metadata=metadata,
	)
