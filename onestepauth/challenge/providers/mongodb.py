import datetime
import logging
import typing

from .abc import ChallengeProviderABC
from ..challenge import Challenge, ChallengePurpose

#

L = logging.getLogger(__name__)

#


def _as_utc(value: datetime.datetime) -> datetime.datetime:
	# MongoDB may return naive datetimes unless the client is tz-aware
	if value.tzinfo is None:
		return value.replace(tzinfo=datetime.timezone.utc)
	return value


class MongoDBChallengeProvider(ChallengeProviderABC):
	"""
	Challenge store shared by all instances through the application MongoDB storage.

	Document:
		_id: "{purpose}:{subject key}"
		sk: subject key
		p: purpose
		ch: nonce
		_c: issued at
		exp: expires at
	"""

	Type = "mongodb"

	ConfigDefaults = {
		"collection": "wach",
	}

	def __init__(self, app, config_section_name="onestepauth:challenge", config=None):
		super().__init__(app, config_section_name, config=config)
		self.StorageService = app.get_service("asab.StorageService")
		self.Collection = self.Config.get("collection")


	async def put(self, challenge: Challenge):
		collection = await self.StorageService.collection(self.Collection)
		await collection.replace_one(
			{"_id": self.key(challenge.SubjectKey, challenge.Purpose)},
			{
				"sk": challenge.SubjectKey,
				"p": str(challenge.Purpose),
				"ch": challenge.Nonce,
				"_c": challenge.IssuedAt,
				"exp": challenge.ExpiresAt,
			},
			upsert=True,
		)


	async def pop(self, subject_key: str, purpose: ChallengePurpose) -> typing.Optional[Challenge]:
		collection = await self.StorageService.collection(self.Collection)
		obj = await collection.find_one_and_delete({"_id": self.key(subject_key, purpose)})
		if obj is None:
			return None
		return Challenge(
			SubjectKey=obj["sk"],
			Purpose=ChallengePurpose(obj["p"]),
			Nonce=bytes(obj["ch"]),
			IssuedAt=_as_utc(obj["_c"]),
			ExpiresAt=_as_utc(obj["exp"]),
		)


	async def delete_expired(self, now: datetime.datetime) -> int:
		collection = await self.StorageService.collection(self.Collection)
		result = await collection.delete_many({"exp": {"$lt": now}})
		return result.deleted_count
