import datetime
import logging
import typing

import asab

from .codes import AuditCode, RiskLevel

#

L = logging.getLogger(__name__)

#


class AuditService(asab.Service):
	"""
	Security event and risk verdict audit trail
	"""

	SecurityEventCollection = "se"
	RiskVerdictCollection = "rv"

	LogLevels = {
		RiskLevel.LOW: logging.INFO,
		RiskLevel.MEDIUM: asab.LOG_NOTICE,
		RiskLevel.HIGH: logging.WARNING,
		RiskLevel.CRITICAL: logging.CRITICAL,
	}

	def __init__(self, app, service_name="onestepauth.AuditService"):
		super().__init__(app, service_name)
		self.StorageService = app.get_service("asab.StorageService")


	async def log_security_event(
		self,
		code: AuditCode,
		risk_level: RiskLevel = RiskLevel.LOW,
		owner_id: typing.Optional[str] = None,
		**kwargs
	):
		"""
		Record a security event. Events of HIGH and CRITICAL level are also published
		as "OneStep.security_incident!" for alerting.
		"""
		struct_data = {"code": code.name, "risk": str(risk_level)}
		if owner_id is not None:
			struct_data["oid"] = owner_id
		struct_data.update(kwargs)
		L.log(self.LogLevels[risk_level], "Security event", struct_data=struct_data)

		event = dict(kwargs)
		event["c"] = code.name
		event["r"] = str(risk_level)
		event["_c"] = datetime.datetime.now(datetime.timezone.utc)
		if owner_id is not None:
			event["oid"] = owner_id

		# Do not use upsertor because it can trigger webhook
		coll = await self.StorageService.collection(self.SecurityEventCollection)
		await coll.insert_one(event)

		if risk_level in (RiskLevel.HIGH, RiskLevel.CRITICAL):
			self.App.PubSub.publish(
				"OneStep.security_incident!",
				code=code.name,
				risk_level=str(risk_level),
				owner_id=owner_id,
			)


	async def log_risk_verdict(self, subject: str, verdict: dict):
		"""
		Record a risk verdict. The verdict must not contain the checked input.
		"""
		record = {
			"c": AuditCode.RISK_VERDICT.name,
			"s": subject,
			"v": verdict,
			"_c": datetime.datetime.now(datetime.timezone.utc),
		}
		coll = await self.StorageService.collection(self.RiskVerdictCollection)
		await coll.insert_one(record)
		L.info("Risk verdict recorded", struct_data={
			"subject": subject,
			"result": verdict.get("result"),
			"score": verdict.get("score"),
		})
