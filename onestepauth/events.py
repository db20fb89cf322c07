class EventTypes:
	PASSCODE_CREATED = "passcode_created"
	PASSCODE_UPDATED = "passcode_updated"
