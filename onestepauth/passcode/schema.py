CREATE_PASSCODE = {
	"type": "object",
	"required": [
		"passcode",
	],
	"properties": {
		"passcode": {
			"type": "string",
		},
		"profile": {
			# Personal data the passcode must not be derived from
			"type": "object",
			"properties": {
				"date_of_birth": {"type": "string"},
				"phone_number": {"type": "string"},
			}
		},
	}
}


VERIFY_PASSCODE = {
	"type": "object",
	"required": [
		"passcode",
	],
	"properties": {
		"passcode": {
			"type": "string",
			"minLength": 6,
			"maxLength": 6,
		},
	}
}
