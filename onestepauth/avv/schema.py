CHECK_TYPES = [
	"PASSCODE_STRENGTH",
	"PASSCODE_PERSONAL_DATA",
	"BIOMETRIC_QUALITY",
	"DEVICE_TRUST",
	"BEHAVIORAL_PATTERN",
	"IP_REPUTATION",
	"LOGIN_FREQUENCY",
	"DEVICE_FINGERPRINT",
]


RISK_CHECK = {
	"type": "object",
	"required": [
		"check_type",
		"input",
	],
	"properties": {
		"check_type": {
			"type": "string",
			"enum": CHECK_TYPES,
		},
		"input": {
			# Checked value, its shape depends on the check type
			"type": ["string", "object"],
		},
		"context": {
			"type": "object",
		},
		"subject": {
			# Identifier of the user being evaluated, enables audit logging of the verdict
			"type": "string",
		},
	}
}


RISK_BATCH = {
	"type": "object",
	"required": [
		"checks",
	],
	"properties": {
		"checks": {
			"type": "array",
			"minItems": 1,
			"items": {
				"type": "object",
				"required": ["check_type", "input"],
				"properties": {
					"check_type": {"type": "string"},
					"input": {"type": ["string", "object"]},
					"context": {"type": "object"},
				}
			}
		},
		"subject": {
			"type": "string",
		},
	}
}
