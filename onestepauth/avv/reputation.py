import asyncio
import logging
import typing

import aiohttp

#

L = logging.getLogger(__name__)

#


class ReputationClient(object):
	"""
	Client of an external network reputation service.

	The service is called as `GET {url}?ip={address}` and is expected to respond with a JSON object
	containing `threat_score` (0 to 100, higher is worse) and optionally `country`, `region`, `city`, `isp`.
	"""

	def __init__(self, url: str, timeout: float = 5.0):
		self.URL = url
		self.Timeout = timeout


	async def lookup(self, ip_address: str) -> typing.Optional[dict]:
		"""
		Return the reputation record, or None if the service cannot provide it
		"""
		try:
			async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.Timeout)) as session:
				async with session.get(self.URL, params={"ip": ip_address}) as resp:
					if resp.status != 200:
						text = await resp.text()
						L.warning("Network reputation lookup failed", struct_data={
							"status": resp.status,
							"response": text[:1000],
						})
						return None
					reputation = await resp.json(content_type=None)
		except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
			L.warning("Network reputation service is unreachable ({}).".format(e.__class__.__name__))
			return None

		if not isinstance(reputation, dict) or "threat_score" not in reputation:
			L.warning("Network reputation response has no threat score")
			return None
		return reputation
