import asyncio
import datetime
import logging
import typing

from .abc import ChallengeProviderABC
from ..challenge import Challenge, ChallengePurpose

#

L = logging.getLogger(__name__)

#


class DictChallengeProvider(ChallengeProviderABC):
	"""
	In-process challenge store for a single instance deployment and for testing
	"""

	Type = "dictionary"

	def __init__(self, app, config_section_name="onestepauth:challenge", config=None):
		super().__init__(app, config_section_name, config=config)
		self.Dictionary: typing.Dict[str, Challenge] = {}
		self.Lock = asyncio.Lock()


	async def put(self, challenge: Challenge):
		async with self.Lock:
			self.Dictionary[self.key(challenge.SubjectKey, challenge.Purpose)] = challenge


	async def pop(self, subject_key: str, purpose: ChallengePurpose) -> typing.Optional[Challenge]:
		async with self.Lock:
			return self.Dictionary.pop(self.key(subject_key, purpose), None)


	async def delete_expired(self, now: datetime.datetime) -> int:
		async with self.Lock:
			expired = [
				key for key, challenge in self.Dictionary.items()
				if challenge.is_expired(now)
			]
			for key in expired:
				del self.Dictionary[key]
		return len(expired)
