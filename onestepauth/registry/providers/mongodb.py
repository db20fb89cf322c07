import datetime
import logging
import typing

import pymongo
import pymongo.errors

from .abc import RegistryProviderABC
from ..credential import Credential
from ... import exceptions

#

L = logging.getLogger(__name__)

#


class MongoDBRegistryProvider(RegistryProviderABC):
	"""
	Credential registry in the application MongoDB storage.

	The credential ID is the document `_id`, so its uniqueness is enforced by the database.
	"""

	Type = "mongodb"

	ConfigDefaults = {
		"collection": "wa",
	}

	def __init__(self, app, config_section_name="onestepauth:registry", config=None):
		super().__init__(app, config_section_name, config=config)
		self.StorageService = app.get_service("asab.StorageService")
		self.Collection = self.Config.get("collection")


	async def initialize(self):
		collection = await self.StorageService.collection(self.Collection)
		try:
			await collection.create_index([("oid", pymongo.ASCENDING), ("a", pymongo.ASCENDING)])
		except pymongo.errors.OperationFailure as e:
			L.error("Failed to create index on credential owner", struct_data={"error": str(e)})


	async def insert(self, credential: Credential, max_active: int):
		collection = await self.StorageService.collection(self.Collection)

		# The limit check and the insert are not one transaction;
		# concurrent registrations of one owner may briefly exceed the limit.
		active_count = await collection.count_documents({"oid": credential.OwnerId, "a": True})
		if active_count >= max_active:
			raise exceptions.RegistrationLimitExceededError(credential.OwnerId, max_active)

		try:
			await collection.insert_one(credential.to_db())
		except pymongo.errors.DuplicateKeyError as e:
			raise exceptions.DuplicateCredentialError(credential.CredentialId, owner_id=credential.OwnerId) from e


	async def get(self, credential_id: bytes) -> typing.Optional[Credential]:
		collection = await self.StorageService.collection(self.Collection)
		obj = await collection.find_one({"_id": credential_id})
		if obj is None:
			return None
		return Credential.from_db(obj)


	async def list_by_owner(self, owner_id: str, active_only: bool = True) -> typing.List[Credential]:
		collection = await self.StorageService.collection(self.Collection)
		query_filter = {"oid": owner_id}
		if active_only:
			query_filter["a"] = True
		cursor = collection.find(query_filter)
		cursor.sort("_c", -1)

		credentials = []
		async for obj in cursor:
			credentials.append(Credential.from_db(obj))
		return credentials


	async def update_counter(self, credential_id: bytes, sign_count: int, last_used_at: datetime.datetime) -> bool:
		collection = await self.StorageService.collection(self.Collection)
		result = await collection.update_one(
			{"_id": credential_id, "sc": {"$lte": sign_count}},
			{"$set": {"sc": sign_count, "ll": last_used_at}},
		)
		return result.matched_count > 0


	async def set_active(self, credential_id: bytes, active: bool) -> bool:
		collection = await self.StorageService.collection(self.Collection)
		result = await collection.update_one({"_id": credential_id}, {"$set": {"a": active}})
		return result.matched_count > 0


	async def set_flagged(self, credential_id: bytes) -> bool:
		collection = await self.StorageService.collection(self.Collection)
		result = await collection.update_one({"_id": credential_id}, {"$set": {"fl": True}})
		return result.matched_count > 0
