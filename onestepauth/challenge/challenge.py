import dataclasses
import datetime
import enum


class ChallengePurpose(enum.StrEnum):
	REGISTER = "REGISTER"
	AUTHENTICATE = "AUTHENTICATE"


@dataclasses.dataclass
class Challenge:
	SubjectKey: str
	Purpose: ChallengePurpose
	Nonce: bytes
	IssuedAt: datetime.datetime
	ExpiresAt: datetime.datetime

	def is_expired(self, now: datetime.datetime = None) -> bool:
		if now is None:
			now = datetime.datetime.now(datetime.timezone.utc)
		return now > self.ExpiresAt
