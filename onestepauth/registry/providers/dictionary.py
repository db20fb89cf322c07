import asyncio
import dataclasses
import datetime
import logging
import typing

from .abc import RegistryProviderABC
from ..credential import Credential
from ... import exceptions

#

L = logging.getLogger(__name__)

#


class DictRegistryProvider(RegistryProviderABC):
	"""
	In-process credential registry for a single instance deployment and for testing
	"""

	Type = "dictionary"

	def __init__(self, app, config_section_name="onestepauth:registry", config=None):
		super().__init__(app, config_section_name, config=config)
		self.Dictionary: typing.Dict[bytes, Credential] = {}
		self.Lock = asyncio.Lock()


	async def insert(self, credential: Credential, max_active: int):
		async with self.Lock:
			if credential.CredentialId in self.Dictionary:
				raise exceptions.DuplicateCredentialError(credential.CredentialId, owner_id=credential.OwnerId)

			active_count = sum(
				1 for stored in self.Dictionary.values()
				if stored.OwnerId == credential.OwnerId and stored.Active
			)
			if active_count >= max_active:
				raise exceptions.RegistrationLimitExceededError(credential.OwnerId, max_active)

			self.Dictionary[credential.CredentialId] = dataclasses.replace(credential)


	async def get(self, credential_id: bytes) -> typing.Optional[Credential]:
		credential = self.Dictionary.get(credential_id)
		if credential is None:
			return None
		return dataclasses.replace(credential)


	async def list_by_owner(self, owner_id: str, active_only: bool = True) -> typing.List[Credential]:
		result = [
			dataclasses.replace(credential)
			for credential in self.Dictionary.values()
			if credential.OwnerId == owner_id and (credential.Active or not active_only)
		]
		result.sort(key=lambda credential: credential.CreatedAt, reverse=True)
		return result


	async def update_counter(self, credential_id: bytes, sign_count: int, last_used_at: datetime.datetime) -> bool:
		async with self.Lock:
			credential = self.Dictionary.get(credential_id)
			if credential is None or credential.SignatureCounter > sign_count:
				return False
			credential.SignatureCounter = sign_count
			credential.LastUsedAt = last_used_at
			return True


	async def set_active(self, credential_id: bytes, active: bool) -> bool:
		async with self.Lock:
			credential = self.Dictionary.get(credential_id)
			if credential is None:
				return False
			credential.Active = active
			return True


	async def set_flagged(self, credential_id: bytes) -> bool:
		async with self.Lock:
			credential = self.Dictionary.get(credential_id)
			if credential is None:
				return False
			credential.Flagged = True
			return True
