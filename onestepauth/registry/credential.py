import dataclasses
import datetime
import enum
import typing

from .. import generic


class DeviceClass(enum.StrEnum):
	TOUCH = "touch"
	FACE = "face"
	UNKNOWN = "unknown"

	@classmethod
	def from_user_agent(cls, user_agent: typing.Optional[str]) -> "DeviceClass":
		"""
		Best-effort guess of the biometric modality from the client user agent
		"""
		if not user_agent:
			return cls.UNKNOWN
		user_agent = user_agent.lower()
		if any(marker in user_agent for marker in ("iphone", "ipad", "macintosh", "android")):
			return cls.TOUCH
		if "windows" in user_agent:
			return cls.FACE
		return cls.UNKNOWN


@dataclasses.dataclass
class Credential:
	CredentialId: bytes
	OwnerId: str
	PublicKey: bytes
	SignatureCounter: int
	DeviceClass: DeviceClass
	Active: bool
	CreatedAt: datetime.datetime
	LastUsedAt: typing.Optional[datetime.datetime] = None
	AAGUID: typing.Optional[str] = None
	Flagged: bool = False

	@classmethod
	def from_db(cls, obj: dict) -> "Credential":
		return cls(
			CredentialId=bytes(obj["_id"]),
			OwnerId=obj["oid"],
			PublicKey=bytes(obj["pk"]),
			SignatureCounter=obj["sc"],
			DeviceClass=DeviceClass(obj.get("dc", DeviceClass.UNKNOWN)),
			Active=obj["a"],
			CreatedAt=obj["_c"],
			LastUsedAt=obj.get("ll"),
			AAGUID=obj.get("aa"),
			Flagged=obj.get("fl", False),
		)

	def to_db(self) -> dict:
		obj = {
			"_id": self.CredentialId,
			"oid": self.OwnerId,
			"pk": self.PublicKey,
			"sc": self.SignatureCounter,
			"dc": str(self.DeviceClass),
			"a": self.Active,
			"_c": self.CreatedAt,
			"fl": self.Flagged,
		}
		if self.LastUsedAt is not None:
			obj["ll"] = self.LastUsedAt
		if self.AAGUID is not None:
			obj["aa"] = self.AAGUID
		return obj

	def rest_get(self) -> dict:
		"""
		Public representation, without the key material
		"""
		return {
			"id": generic.b64url_encode(self.CredentialId),
			"owner_id": self.OwnerId,
			"device_class": str(self.DeviceClass),
			"active": self.Active,
			"sign_count": self.SignatureCounter,
			"created": self.CreatedAt,
			"last_used": self.LastUsedAt,
			"aaguid": self.AAGUID,
			"flagged": self.Flagged,
		}
