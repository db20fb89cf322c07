import logging

import asab.web.rest

from ..audit import AuditCode, RiskLevel
from ..decorators import require_authentication
from .. import exceptions, generic

#

L = logging.getLogger(__name__)

#


class RegistryHandler(object):
	"""
	Manage the current user's WebAuthn credentials

	---
	tags: ["WebAuthn"]
	"""

	def __init__(self, app, registry_svc):
		self.RegistryService = registry_svc
		self.AuditService = app.get_service("onestepauth.AuditService")

		web_app = app.WebContainer.WebApp
		web_app.router.add_get("/webauthn/credentials", self.list_credentials)
		web_app.router.add_delete("/webauthn/credentials/{credential_id}", self.deactivate_credential)


	@require_authentication
	async def list_credentials(self, request, *, owner_id):
		"""
		List the current user's WebAuthn credentials, including the deactivated ones
		"""
		credentials = await self.RegistryService.list_credentials(owner_id)
		return asab.web.rest.json_response(request, {
			"data": [credential.rest_get() for credential in credentials],
			"count": len(credentials),
		})


	@require_authentication
	async def deactivate_credential(self, request, *, owner_id):
		"""
		Deactivate the current user's WebAuthn credential

		The credential ID is base64url-encoded.
		"""
		credential_id = generic.b64url_decode(request.match_info["credential_id"])
		try:
			await self.RegistryService.deactivate(credential_id, owner_id=owner_id)
		except exceptions.CredentialNotFoundError:
			return asab.web.rest.json_response(request, {"result": "NOT-FOUND"}, status=404)

		await self.AuditService.log_security_event(
			AuditCode.WEBAUTHN_CREDENTIAL_DEACTIVATED, RiskLevel.LOW,
			owner_id=owner_id, wacid=credential_id.hex())
		return asab.web.rest.json_response(request, {"result": "OK"})
