import datetime
import logging
import typing

import asab

from .credential import Credential, DeviceClass
from .providers import RegistryProviderABC, DictRegistryProvider, MongoDBRegistryProvider
from .. import exceptions

#

L = logging.getLogger(__name__)

#


asab.Config.add_defaults({
	"onestepauth:registry": {
		# Credential storage backend: "mongodb" or "dictionary" (in-process, single instance only)
		"provider": "mongodb",

		# Maximum number of active WebAuthn credentials per owner
		"max_credentials": 3,
	}
})


class RegistryService(asab.Service):
	"""
	Durable registry of WebAuthn credentials
	"""

	def __init__(self, app, service_name="onestepauth.RegistryService", provider: RegistryProviderABC = None):
		super().__init__(app, service_name)
		self.MaxCredentials = asab.Config.getint("onestepauth:registry", "max_credentials")

		if provider is None:
			provider = self._create_provider(app)
		self.Provider = provider


	def _create_provider(self, app) -> RegistryProviderABC:
		provider_type = asab.Config.get("onestepauth:registry", "provider")
		if provider_type == DictRegistryProvider.Type:
			return DictRegistryProvider(app)
		elif provider_type == MongoDBRegistryProvider.Type:
			return MongoDBRegistryProvider(app)
		else:
			raise ValueError("Unsupported registry provider type: {!r}".format(provider_type))


	async def initialize(self, app):
		await self.Provider.initialize()


	async def find_active_by_owner(self, owner_id: str) -> typing.List[Credential]:
		return await self.Provider.list_by_owner(owner_id, active_only=True)


	async def list_credentials(self, owner_id: str) -> typing.List[Credential]:
		"""
		List all credentials of the owner including the deactivated ones
		"""
		return await self.Provider.list_by_owner(owner_id, active_only=False)


	async def find_by_credential_id(self, credential_id: bytes) -> typing.Optional[Credential]:
		return await self.Provider.get(credential_id)


	async def register(
		self,
		owner_id: str,
		credential_id: bytes,
		public_key: bytes,
		device_class: DeviceClass = DeviceClass.UNKNOWN,
		aaguid: typing.Optional[str] = None,
	) -> Credential:
		"""
		Register a new active credential with signature counter 0.

		Raises DuplicateCredentialError if the credential ID is registered to anyone,
		RegistrationLimitExceededError if the owner has no free slot.
		"""
		credential = Credential(
			CredentialId=credential_id,
			OwnerId=owner_id,
			PublicKey=public_key,
			SignatureCounter=0,
			DeviceClass=DeviceClass(device_class),
			Active=True,
			CreatedAt=datetime.datetime.now(datetime.timezone.utc),
			AAGUID=aaguid,
		)
		await self.Provider.insert(credential, self.MaxCredentials)
		L.log(asab.LOG_NOTICE, "WebAuthn credential registered", struct_data={
			"oid": owner_id,
			"wacid": credential_id.hex(),
			"dc": str(credential.DeviceClass),
		})
		return credential


	async def record_successful_assertion(self, credential_id: bytes, sign_count: int) -> Credential:
		"""
		Store the signature counter of a verified assertion.

		Raises CounterRegressionError, without touching the stored counter, if the presented
		counter is lower than the stored one.
		"""
		credential = await self.Provider.get(credential_id)
		if credential is None:
			raise exceptions.CredentialNotFoundError(credential_id)

		if sign_count < credential.SignatureCounter:
			raise exceptions.CounterRegressionError(
				credential_id, credential.SignatureCounter, sign_count, owner_id=credential.OwnerId)

		if sign_count == credential.SignatureCounter and sign_count != 0:
			L.warning("WebAuthn signature counter did not increase", struct_data={
				"oid": credential.OwnerId,
				"wacid": credential_id.hex(),
				"sc": sign_count,
			})

		now = datetime.datetime.now(datetime.timezone.utc)
		updated = await self.Provider.update_counter(credential_id, sign_count, now)
		if not updated:
			# A concurrent assertion stored a higher counter in the meantime
			current = await self.Provider.get(credential_id)
			raise exceptions.CounterRegressionError(
				credential_id,
				current.SignatureCounter if current is not None else credential.SignatureCounter,
				sign_count,
				owner_id=credential.OwnerId,
			)

		credential.SignatureCounter = sign_count
		credential.LastUsedAt = now
		return credential


	async def deactivate(self, credential_id: bytes, owner_id: typing.Optional[str] = None):
		"""
		Deactivate the credential. It is kept in the registry but can no longer be used.

		If owner_id is specified, a credential of any other owner is reported as not found.
		"""
		credential = await self.Provider.get(credential_id)
		if credential is None:
			raise exceptions.CredentialNotFoundError(credential_id)
		if owner_id is not None and credential.OwnerId != owner_id:
			raise exceptions.CredentialNotFoundError(credential_id)

		if not await self.Provider.set_active(credential_id, False):
			raise exceptions.CredentialNotFoundError(credential_id)

		L.log(asab.LOG_NOTICE, "WebAuthn credential deactivated", struct_data={
			"oid": credential.OwnerId,
			"wacid": credential_id.hex(),
		})


	async def flag_for_review(self, credential_id: bytes):
		"""
		Mark the credential for security review
		"""
		if not await self.Provider.set_flagged(credential_id):
			raise exceptions.CredentialNotFoundError(credential_id)
		L.warning("WebAuthn credential flagged for security review", struct_data={"wacid": credential_id.hex()})
