import typing

import asab.exceptions


class OneStepAuthError(Exception):
	"""
	Generic OneStep Auth error
	"""
	Code = "ERROR"


class ChallengeError(OneStepAuthError):
	"""
	Challenge cannot be consumed.

	Recoverable by requesting a fresh challenge.
	"""
	def __init__(self, message, *args, subject_key=None, purpose=None):
		self.SubjectKey = subject_key
		self.Purpose = purpose
		super().__init__(message, *args)


class ChallengeNotFoundError(ChallengeError, KeyError):
	"""
	No live challenge for the subject and purpose (never issued, or already consumed)
	"""
	Code = "CHALLENGE_NOT_FOUND"

	def __init__(self, subject_key, purpose, *args):
		super().__init__(
			"No challenge found for {!r} ({})".format(subject_key, purpose), *args,
			subject_key=subject_key, purpose=purpose)


class ChallengeExpiredError(ChallengeError):
	Code = "CHALLENGE_EXPIRED"

	def __init__(self, subject_key, purpose, *args):
		super().__init__(
			"Challenge for {!r} ({}) expired".format(subject_key, purpose), *args,
			subject_key=subject_key, purpose=purpose)


class ChallengeMismatchError(ChallengeError):
	Code = "CHALLENGE_MISMATCH"

	def __init__(self, subject_key, purpose, *args):
		super().__init__(
			"Presented challenge does not match for {!r} ({})".format(subject_key, purpose), *args,
			subject_key=subject_key, purpose=purpose)


class CeremonyError(OneStepAuthError):
	"""
	Client response failed verification.

	Terminal for the current attempt, a new attempt requires a fresh challenge.
	"""
	def __init__(self, message, *args, credential_id: typing.Optional[bytes] = None):
		self.CredentialId = credential_id
		super().__init__(message, *args)


class ClientDataTypeMismatchError(CeremonyError):
	Code = "TYPE_MISMATCH"

	def __init__(self, expected: str, actual, *args):
		self.Expected = expected
		self.Actual = actual
		super().__init__("Expected client data type {!r}, got {!r}".format(expected, actual), *args)


class OriginMismatchError(CeremonyError):
	Code = "ORIGIN_MISMATCH"

	def __init__(self, expected: str, actual, *args):
		self.Expected = expected
		self.Actual = actual
		super().__init__("Expected origin {!r}, got {!r}".format(expected, actual), *args)


class UnknownCredentialError(CeremonyError, KeyError):
	Code = "UNKNOWN_CREDENTIAL"

	def __init__(self, credential_id: bytes, *args):
		super().__init__("Unknown WebAuthn credential", *args, credential_id=credential_id)


class InactiveCredentialError(CeremonyError):
	Code = "INACTIVE_CREDENTIAL"

	def __init__(self, credential_id: bytes, *args):
		super().__init__("WebAuthn credential is not active", *args, credential_id=credential_id)


class SignatureInvalidError(CeremonyError):
	Code = "SIGNATURE_INVALID"

	def __init__(self, credential_id: bytes, *args):
		super().__init__("Assertion signature could not be verified", *args, credential_id=credential_id)


class MalformedResponseError(CeremonyError, asab.exceptions.ValidationError):
	Code = "MALFORMED_RESPONSE"


class RegistrationLimitExceededError(OneStepAuthError):
	"""
	Owner already holds the maximum number of active credentials
	"""
	Code = "REGISTRATION_LIMIT_EXCEEDED"

	def __init__(self, owner_id: str, limit: int, *args):
		self.OwnerId = owner_id
		self.Limit = limit
		super().__init__("Maximum number of WebAuthn credentials ({}) reached".format(limit), *args)


class CredentialNotFoundError(OneStepAuthError, KeyError):
	Code = "CREDENTIAL_NOT_FOUND"

	def __init__(self, credential_id: bytes, *args):
		self.CredentialId = credential_id
		super().__init__("WebAuthn credential not found", *args)


class SecurityIncidentError(OneStepAuthError):
	"""
	Failure that must be reported as a security event, never as a generic authentication failure
	"""
	def __init__(self, message, *args, credential_id: typing.Optional[bytes] = None, owner_id=None):
		self.CredentialId = credential_id
		self.OwnerId = owner_id
		super().__init__(message, *args)


class CounterRegressionError(SecurityIncidentError):
	"""
	Presented signature counter is lower than the stored one (possible cloned authenticator)
	"""
	Code = "COUNTER_REGRESSION"

	def __init__(self, credential_id: bytes, stored_counter: int, presented_counter: int, *args, owner_id=None):
		self.StoredCounter = stored_counter
		self.PresentedCounter = presented_counter
		super().__init__(
			"Signature counter regressed from {} to {}".format(stored_counter, presented_counter), *args,
			credential_id=credential_id, owner_id=owner_id)


class DuplicateCredentialError(SecurityIncidentError):
	"""
	Credential ID is already registered.

	The message is generic on purpose: the owner of the existing credential is never disclosed.
	"""
	Code = "DUPLICATE_CREDENTIAL"

	def __init__(self, credential_id: bytes, *args, owner_id=None):
		super().__init__(
			"This credential is already registered", *args,
			credential_id=credential_id, owner_id=owner_id)


class WeakPasscodeError(OneStepAuthError, asab.exceptions.ValidationError):
	"""
	Passcode was rejected by the risk engine
	"""
	Code = "WEAK_PASSCODE"

	def __init__(self, verdict: dict, *args):
		self.Verdict = verdict
		super().__init__("Passcode does not meet security requirements", *args)


class PasscodeExistsError(OneStepAuthError):
	Code = "PASSCODE_EXISTS"

	def __init__(self, owner_id: str, *args):
		self.OwnerId = owner_id
		super().__init__("Passcode already exists for {!r}".format(owner_id), *args)
