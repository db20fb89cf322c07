import logging

import asab.web.rest

from . import schema
from .. import exceptions
from ..decorators import require_authentication

#

L = logging.getLogger(__name__)

#


class PasscodeHandler(object):
	"""
	Passcode enrollment and verification

	---
	tags: ["Passcode"]
	"""

	def __init__(self, app, passcode_svc):
		self.PasscodeService = passcode_svc

		web_app = app.WebContainer.WebApp
		web_app.router.add_put("/passcode", self.create_passcode)
		web_app.router.add_delete("/passcode", self.delete_passcode)
		web_app.router.add_post("/passcode/{owner_id}/verify", self.verify_passcode)


	@asab.web.rest.json_schema_handler(schema.CREATE_PASSCODE)
	@require_authentication
	async def create_passcode(self, request, *, json_data, owner_id):
		"""
		Set a new passcode for the current user

		The passcode is evaluated by the risk engine and rejected if it is weak
		or derived from the supplied personal data.
		"""
		try:
			verdict = await self.PasscodeService.create_passcode(
				owner_id, json_data["passcode"], profile=json_data.get("profile"))
		except exceptions.WeakPasscodeError as e:
			return asab.web.rest.json_response(request, {
				"result": "FAILED",
				"tech_err": str(e),
				"verdict": e.Verdict,
			}, status=400)
		except exceptions.PasscodeExistsError as e:
			return asab.web.rest.json_response(request, {
				"result": "CONFLICT",
				"tech_err": str(e),
			}, status=409)

		return asab.web.rest.json_response(request, {
			"result": "OK",
			"verdict": verdict.rest_get(),
		})


	@require_authentication
	async def delete_passcode(self, request, *, owner_id):
		"""
		Remove the current user's passcode
		"""
		try:
			await self.PasscodeService.delete_passcode(owner_id)
		except KeyError:
			return asab.web.rest.json_response(request, {"result": "NOT-FOUND"}, status=404)
		return asab.web.rest.json_response(request, {"result": "OK"})


	@asab.web.rest.json_schema_handler(schema.VERIFY_PASSCODE)
	async def verify_passcode(self, request, *, json_data):
		"""
		Verify the passcode
		"""
		owner_id = request.match_info["owner_id"]
		outcome = await self.PasscodeService.verify_passcode(owner_id, json_data["passcode"])
		if outcome.Verified:
			status = 200
		elif outcome.Retryable:
			status = 401
		else:
			status = 403
		return asab.web.rest.json_response(request, outcome.rest_get(), status=status)
