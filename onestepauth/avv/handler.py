import logging

import asab.web.rest

from . import schema

#

L = logging.getLogger(__name__)

#


class RiskHandler(object):
	"""
	Auto-Verification & Validation (AVV) risk checks

	---
	tags: ["AVV"]
	"""

	def __init__(self, app, risk_svc):
		self.RiskService = risk_svc

		web_app = app.WebContainer.WebApp
		web_app.router.add_post("/avv/check", self.check)
		web_app.router.add_post("/avv/batch", self.batch)


	@asab.web.rest.json_schema_handler(schema.RISK_CHECK)
	async def check(self, request, *, json_data):
		"""
		Evaluate a single risk check
		"""
		verdict = await self.RiskService.evaluate(
			json_data["check_type"],
			json_data["input"],
			json_data.get("context"),
			subject=json_data.get("subject"),
		)
		return asab.web.rest.json_response(request, verdict.rest_get())


	@asab.web.rest.json_schema_handler(schema.RISK_BATCH)
	async def batch(self, request, *, json_data):
		"""
		Evaluate a batch of risk checks and get the combined verdict

		Unknown check types are evaluated as WARNING.
		"""
		verdict = await self.RiskService.evaluate_batch(json_data["checks"], subject=json_data.get("subject"))
		return asab.web.rest.json_response(request, verdict.rest_get())
