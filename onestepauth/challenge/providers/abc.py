import abc
import datetime
import logging
import typing

import asab

from ..challenge import Challenge, ChallengePurpose

#

L = logging.getLogger(__name__)

#


class ChallengeProviderABC(asab.Configurable, abc.ABC):
	"""
	Storage backend of live WebAuthn challenges.

	Holds at most one challenge per (subject key, purpose) pair.
	"""

	Type = "abc"

	def __init__(self, app, config_section_name, config=None):
		super().__init__(config_section_name=config_section_name, config=config)
		self.App = app


	@staticmethod
	def key(subject_key: str, purpose: ChallengePurpose) -> str:
		return "{}:{}".format(purpose, subject_key)


	@abc.abstractmethod
	async def put(self, challenge: Challenge):
		"""
		Store the challenge, replacing any existing one with the same subject key and purpose
		"""
		raise NotImplementedError("in {}".format(self.Type))


	@abc.abstractmethod
	async def pop(self, subject_key: str, purpose: ChallengePurpose) -> typing.Optional[Challenge]:
		"""
		Atomically remove and return the challenge, or return None if there is none
		"""
		raise NotImplementedError("in {}".format(self.Type))


	@abc.abstractmethod
	async def delete_expired(self, now: datetime.datetime) -> int:
		"""
		Delete challenges that expired before `now` and return how many were deleted
		"""
		raise NotImplementedError("in {}".format(self.Type))
