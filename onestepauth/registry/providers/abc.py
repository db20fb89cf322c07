import abc
import datetime
import logging
import typing

import asab

from ..credential import Credential

#

L = logging.getLogger(__name__)

#


class RegistryProviderABC(asab.Configurable, abc.ABC):
	"""
	Storage backend of registered WebAuthn credentials
	"""

	Type = "abc"

	def __init__(self, app, config_section_name, config=None):
		super().__init__(config_section_name=config_section_name, config=config)
		self.App = app


	async def initialize(self):
		pass


	@abc.abstractmethod
	async def insert(self, credential: Credential, max_active: int):
		"""
		Store a new credential.

		The uniqueness of the credential ID and the per-owner limit of active credentials
		must be checked and the credential inserted as one step.

		Raises DuplicateCredentialError or RegistrationLimitExceededError.
		"""
		raise NotImplementedError("in {}".format(self.Type))


	@abc.abstractmethod
	async def get(self, credential_id: bytes) -> typing.Optional[Credential]:
		raise NotImplementedError("in {}".format(self.Type))


	@abc.abstractmethod
	async def list_by_owner(self, owner_id: str, active_only: bool = True) -> typing.List[Credential]:
		raise NotImplementedError("in {}".format(self.Type))


	@abc.abstractmethod
	async def update_counter(self, credential_id: bytes, sign_count: int, last_used_at: datetime.datetime) -> bool:
		"""
		Set the signature counter unless the stored one is greater.

		Return False if nothing was updated.
		"""
		raise NotImplementedError("in {}".format(self.Type))


	@abc.abstractmethod
	async def set_active(self, credential_id: bytes, active: bool) -> bool:
		"""
		Return False if the credential does not exist
		"""
		raise NotImplementedError("in {}".format(self.Type))


	@abc.abstractmethod
	async def set_flagged(self, credential_id: bytes) -> bool:
		"""
		Mark the credential for security review. Return False if the credential does not exist.
		"""
		raise NotImplementedError("in {}".format(self.Type))
