import enum


class AuditCode(enum.Enum):

	def _generate_next_value_(name, start, count, last_values):
		return name

	LOGIN_SUCCESS = enum.auto()
	LOGIN_FAILED = enum.auto()
	WEBAUTHN_CREDENTIAL_REGISTERED = enum.auto()
	WEBAUTHN_REGISTRATION_FAILED = enum.auto()
	WEBAUTHN_REGISTRATION_LIMIT_EXCEEDED = enum.auto()
	WEBAUTHN_DUPLICATE_CREDENTIAL = enum.auto()
	WEBAUTHN_COUNTER_REGRESSION = enum.auto()
	WEBAUTHN_CREDENTIAL_DEACTIVATED = enum.auto()
	PASSCODE_CREATED = enum.auto()
	PASSCODE_REJECTED = enum.auto()
	PASSCODE_DELETED = enum.auto()
	PASSCODE_LOCKED = enum.auto()
	RISK_VERDICT = enum.auto()


class RiskLevel(enum.StrEnum):
	LOW = "LOW"
	MEDIUM = "MEDIUM"
	HIGH = "HIGH"
	CRITICAL = "CRITICAL"
