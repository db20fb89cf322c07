import logging

import aiohttp.web
import asab
import asab.web.rest

from . import schema
from ..decorators import require_authentication

#

L = logging.getLogger(__name__)

#


class CeremonyHandler(object):
	"""
	WebAuthn registration and authentication

	---
	tags: ["WebAuthn"]
	"""

	def __init__(self, app, ceremony_svc):
		self.CeremonyService = ceremony_svc

		web_app = app.WebContainer.WebApp
		web_app.router.add_post("/webauthn/challenge", self.request_challenge)
		web_app.router.add_post("/webauthn/register", self.register_credential)
		web_app.router.add_post("/webauthn/authenticate", self.authenticate)


	@asab.web.rest.json_schema_handler(schema.REQUEST_CHALLENGE)
	async def request_challenge(self, request, *, json_data):
		"""
		Issue a challenge and get WebAuthn registration or authentication options

		Registration options are issued only to the owner of the session token.
		"""
		if json_data["purpose"] == "REGISTER":
			owner_id = getattr(request, "OwnerId", None)
			if owner_id is None:
				L.log(asab.LOG_NOTICE, "Unauthorized access: Registration challenge requires authentication")
				return aiohttp.web.HTTPUnauthorized()
			options = await self.CeremonyService.get_registration_options(
				owner_id, device_hint=json_data.get("device_hint"))
		else:
			options = await self.CeremonyService.get_authentication_options(json_data["owner_id"])
		return asab.web.rest.json_response(request, options)


	@asab.web.rest.json_schema_handler(schema.REGISTER_WEBAUTHN_CREDENTIAL)
	@require_authentication
	async def register_credential(self, request, *, json_data, owner_id):
		"""
		Complete the registration of a new WebAuthn credential for the current user
		"""
		device_hint = json_data.pop("device_hint", None)
		outcome = await self.CeremonyService.complete_registration(
			owner_id, json_data,
			user_agent=request.headers.get("User-Agent"),
			device_hint=device_hint,
		)
		return asab.web.rest.json_response(request, outcome.rest_get(), status=_status(outcome))


	@asab.web.rest.json_schema_handler(schema.AUTHENTICATE_WEBAUTHN)
	async def authenticate(self, request, *, json_data):
		"""
		Verify a WebAuthn authentication assertion
		"""
		owner_id = json_data.pop("owner_id")
		outcome = await self.CeremonyService.complete_authentication(owner_id, json_data)
		return asab.web.rest.json_response(request, outcome.rest_get(), status=_status(outcome))


def _status(outcome) -> int:
	if outcome.Verified:
		return 200
	if outcome.IsSecurityIncident:
		return 403
	return 400
