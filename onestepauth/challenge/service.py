import datetime
import hmac
import logging
import secrets

import asab

from .challenge import Challenge, ChallengePurpose
from .providers import ChallengeProviderABC, DictChallengeProvider, MongoDBChallengeProvider
from .. import exceptions

#

L = logging.getLogger(__name__)

#


asab.Config.add_defaults({
	"onestepauth:challenge": {
		# Challenge storage backend: "mongodb" or "dictionary" (in-process, single instance only)
		"provider": "mongodb",
		"challenge_timeout": "5 m",
	}
})


class ChallengeService(asab.Service):
	"""
	Issues and consumes single-use WebAuthn challenges
	"""

	NonceLength = 32

	def __init__(self, app, service_name="onestepauth.ChallengeService", provider: ChallengeProviderABC = None):
		super().__init__(app, service_name)
		self.ChallengeTimeout = datetime.timedelta(
			seconds=asab.Config.getseconds("onestepauth:challenge", "challenge_timeout"))

		if provider is None:
			provider = self._create_provider(app)
		self.Provider = provider

		app.PubSub.subscribe("Application.housekeeping!", self._on_housekeeping)
		app.PubSub.subscribe("Application.tick/60!", self._on_tick)


	def _create_provider(self, app) -> ChallengeProviderABC:
		provider_type = asab.Config.get("onestepauth:challenge", "provider")
		if provider_type == DictChallengeProvider.Type:
			return DictChallengeProvider(app)
		elif provider_type == MongoDBChallengeProvider.Type:
			return MongoDBChallengeProvider(app)
		else:
			raise ValueError("Unsupported challenge provider type: {!r}".format(provider_type))


	async def _on_housekeeping(self, event_name):
		await self.delete_expired()


	async def _on_tick(self, event_name):
		await self.delete_expired()


	async def issue(self, subject_key: str, purpose: ChallengePurpose) -> Challenge:
		"""
		Create a fresh challenge for the subject, replacing any live challenge with the same purpose
		"""
		now = datetime.datetime.now(datetime.timezone.utc)
		challenge = Challenge(
			SubjectKey=subject_key,
			Purpose=ChallengePurpose(purpose),
			Nonce=secrets.token_bytes(self.NonceLength),
			IssuedAt=now,
			ExpiresAt=now + self.ChallengeTimeout,
		)
		await self.Provider.put(challenge)
		L.info("Challenge issued", struct_data={"sk": subject_key, "purpose": str(purpose)})
		return challenge


	async def consume(self, subject_key: str, purpose: ChallengePurpose, presented_nonce: bytes) -> Challenge:
		"""
		Remove the challenge and check it against the presented nonce.

		The challenge is gone after this call whatever its outcome.
		"""
		challenge = await self.Provider.pop(subject_key, purpose)
		if challenge is None:
			raise exceptions.ChallengeNotFoundError(subject_key, purpose)

		if challenge.is_expired():
			raise exceptions.ChallengeExpiredError(subject_key, purpose)

		if not hmac.compare_digest(challenge.Nonce, presented_nonce or b""):
			raise exceptions.ChallengeMismatchError(subject_key, purpose)

		return challenge


	async def discard(self, subject_key: str, purpose: ChallengePurpose):
		"""
		Remove the challenge without checking it
		"""
		await self.Provider.pop(subject_key, purpose)


	async def delete_expired(self) -> int:
		"""
		Delete expired challenges
		"""
		count = await self.Provider.delete_expired(datetime.datetime.now(datetime.timezone.utc))
		if count > 0:
			L.log(asab.LOG_NOTICE, "Expired challenges deleted", struct_data={"count": count})
		return count
