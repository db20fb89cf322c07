from ..codes import CheckType
from .passcode import check_passcode_strength, check_passcode_personal_data
from .device import check_device_trust, check_device_fingerprint, check_biometric_quality
from .behavior import check_behavioral_pattern, check_login_frequency
from .network import check_ip_reputation, is_internal_address

CHECKS = {
	CheckType.PASSCODE_STRENGTH: check_passcode_strength,
	CheckType.PASSCODE_PERSONAL_DATA: check_passcode_personal_data,
	CheckType.BIOMETRIC_QUALITY: check_biometric_quality,
	CheckType.DEVICE_TRUST: check_device_trust,
	CheckType.BEHAVIORAL_PATTERN: check_behavioral_pattern,
	CheckType.IP_REPUTATION: check_ip_reputation,
	CheckType.LOGIN_FREQUENCY: check_login_frequency,
	CheckType.DEVICE_FINGERPRINT: check_device_fingerprint,
}

__all__ = [
	"CHECKS",
	"check_passcode_strength",
	"check_passcode_personal_data",
	"check_device_trust",
	"check_device_fingerprint",
	"check_biometric_quality",
	"check_behavioral_pattern",
	"check_login_frequency",
	"check_ip_reputation",
	"is_internal_address",
]
