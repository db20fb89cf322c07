import enum


class CheckType(enum.StrEnum):
	PASSCODE_STRENGTH = "PASSCODE_STRENGTH"
	PASSCODE_PERSONAL_DATA = "PASSCODE_PERSONAL_DATA"
	BIOMETRIC_QUALITY = "BIOMETRIC_QUALITY"
	DEVICE_TRUST = "DEVICE_TRUST"
	BEHAVIORAL_PATTERN = "BEHAVIORAL_PATTERN"
	IP_REPUTATION = "IP_REPUTATION"
	LOGIN_FREQUENCY = "LOGIN_FREQUENCY"
	DEVICE_FINGERPRINT = "DEVICE_FINGERPRINT"


class CheckResult(enum.StrEnum):
	PASS = "PASS"
	WARNING = "WARNING"
	FAIL = "FAIL"


# Checks whose input is a secret and must never reach logs or the audit trail
SECRET_INPUT_CHECKS = frozenset({
	CheckType.PASSCODE_STRENGTH,
	CheckType.PASSCODE_PERSONAL_DATA,
})
