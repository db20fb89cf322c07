import dataclasses
import enum
import typing

from .. import generic


class CeremonyState(enum.StrEnum):
	# A ceremony in progress is represented by its live challenge, only the final state is reported
	VERIFIED = "VERIFIED"
	REJECTED = "REJECTED"


class LoginMethod(enum.StrEnum):
	WEBAUTHN = "webauthn"
	PASSCODE = "passcode"


class RejectReason(enum.StrEnum):
	CHALLENGE_NOT_FOUND = "CHALLENGE_NOT_FOUND"
	CHALLENGE_EXPIRED = "CHALLENGE_EXPIRED"
	CHALLENGE_MISMATCH = "CHALLENGE_MISMATCH"
	TYPE_MISMATCH = "TYPE_MISMATCH"
	ORIGIN_MISMATCH = "ORIGIN_MISMATCH"
	UNKNOWN_CREDENTIAL = "UNKNOWN_CREDENTIAL"
	INACTIVE_CREDENTIAL = "INACTIVE_CREDENTIAL"
	SIGNATURE_INVALID = "SIGNATURE_INVALID"
	MALFORMED_RESPONSE = "MALFORMED_RESPONSE"
	COUNTER_REGRESSION = "COUNTER_REGRESSION"
	DUPLICATE_CREDENTIAL = "DUPLICATE_CREDENTIAL"
	REGISTRATION_LIMIT_EXCEEDED = "REGISTRATION_LIMIT_EXCEEDED"
	PASSCODE_NOT_SET = "PASSCODE_NOT_SET"
	PASSCODE_INVALID = "PASSCODE_INVALID"
	PASSCODE_LOCKED = "PASSCODE_LOCKED"


# Rejections that a new attempt with a fresh challenge cannot fix
NON_RETRYABLE = frozenset({
	RejectReason.COUNTER_REGRESSION,
	RejectReason.DUPLICATE_CREDENTIAL,
	RejectReason.REGISTRATION_LIMIT_EXCEEDED,
	RejectReason.PASSCODE_LOCKED,
})

SECURITY_INCIDENTS = frozenset({
	RejectReason.COUNTER_REGRESSION,
	RejectReason.DUPLICATE_CREDENTIAL,
})


@dataclasses.dataclass
class CeremonyOutcome:
	Verified: bool
	Reason: typing.Optional[RejectReason] = None
	OwnerId: typing.Optional[str] = None
	Method: typing.Optional[LoginMethod] = None
	Retryable: bool = False
	Message: typing.Optional[str] = None
	CredentialId: typing.Optional[bytes] = None

	@property
	def State(self) -> CeremonyState:
		return CeremonyState.VERIFIED if self.Verified else CeremonyState.REJECTED

	@property
	def IsSecurityIncident(self) -> bool:
		return self.Reason in SECURITY_INCIDENTS

	@classmethod
	def verified(cls, owner_id: str, login_method: LoginMethod = None, credential_id: bytes = None):
		return cls(Verified=True, OwnerId=owner_id, Method=login_method, CredentialId=credential_id)

	@classmethod
	def rejected(cls, reason: RejectReason, message: str = None):
		reason = RejectReason(reason)
		return cls(
			Verified=False,
			Reason=reason,
			Retryable=reason not in NON_RETRYABLE,
			Message=message,
		)

	def rest_get(self) -> dict:
		result = {"verified": self.Verified}
		if self.Verified:
			result["owner_id"] = self.OwnerId
			if self.Method is not None:
				result["login_method"] = str(self.Method)
			if self.CredentialId is not None:
				result["credential_id"] = generic.b64url_encode(self.CredentialId)
		else:
			result["reason"] = str(self.Reason)
			result["retryable"] = self.Retryable
			if self.Message is not None:
				result["message"] = self.Message
		return result
