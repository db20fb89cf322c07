REQUEST_CHALLENGE = {
	"type": "object",
	"required": [
		"purpose",
	],
	"properties": {
		"purpose": {
			"type": "string",
			"enum": ["REGISTER", "AUTHENTICATE"],
		},
		"owner_id": {
			# Owner to authenticate. A registration challenge is always issued to the session owner.
			"type": "string",
			"minLength": 1,
		},
		"device_hint": {
			"type": "string",
			"enum": ["touch", "face", "unknown"],
		},
	},
	"if": {
		"properties": {"purpose": {"const": "AUTHENTICATE"}},
	},
	"then": {
		"required": ["owner_id"],
	},
}


REGISTER_WEBAUTHN_CREDENTIAL = {
	"type": "object",
	"required": [
		"id",
		"rawId",
		"response",
		"type",
	],
	"properties": {
		"device_hint": {
			"type": "string",
			"enum": ["touch", "face", "unknown"],
		},
		"id": {
			# Credential ID
			"type": "string"
		},
		"rawId": {
			# The ID again, base64url-encoded binary
			"type": "string"
		},
		"response": {
			"type": "object",
			"required": [
				"clientDataJSON",
				"attestationObject",
			],
			"properties": {
				"clientDataJSON": {"type": "string"},
				"attestationObject": {"type": "string"},
			}
		},
		"type": {
			"type": "string",
			"enum": ["public-key"],
		},
	}
}


AUTHENTICATE_WEBAUTHN = {
	"type": "object",
	"required": [
		"owner_id",
		"id",
		"rawId",
		"response",
		"type",
	],
	"properties": {
		"owner_id": {
			"type": "string",
			"minLength": 1,
		},
		"id": {"type": "string"},
		"rawId": {"type": "string"},
		"response": {
			"type": "object",
			"required": [
				"clientDataJSON",
				"authenticatorData",
				"signature",
			],
			"properties": {
				"clientDataJSON": {"type": "string"},
				"authenticatorData": {"type": "string"},
				"signature": {"type": "string"},
				"userHandle": {"type": ["string", "null"]},
			}
		},
		"type": {
			"type": "string",
			"enum": ["public-key"],
		},
	}
}
