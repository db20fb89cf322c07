import logging
import typing

import asab

from .checks import CHECKS, is_internal_address
from .codes import CheckResult, CheckType, SECRET_INPUT_CHECKS
from .reputation import ReputationClient
from .verdict import BatchVerdict, RiskVerdict, fold_verdicts

#

L = logging.getLogger(__name__)

#


asab.Config.add_defaults({
	"onestepauth:avv": {
		# URL of the network reputation service; the IP_REPUTATION check degrades to WARNING without it
		"reputation_url": "",
		"reputation_timeout": "5 s",

		# Batch verdict is WARNING when the mean score is below this value
		"warning_threshold": 70,
	}
})


class RiskService(asab.Service):
	"""
	Auto-Verification & Validation (AVV) risk engine
	"""

	def __init__(self, app, service_name="onestepauth.RiskService"):
		super().__init__(app, service_name)
		self.AuditService = app.get_service("onestepauth.AuditService")
		self.WarningThreshold = asab.Config.getint("onestepauth:avv", "warning_threshold")

		reputation_url = asab.Config.get("onestepauth:avv", "reputation_url")
		if len(reputation_url) > 0:
			self.ReputationClient = ReputationClient(
				reputation_url,
				timeout=asab.Config.getseconds("onestepauth:avv", "reputation_timeout"),
			)
		else:
			self.ReputationClient = None


	async def evaluate(
		self,
		check_type: str,
		input,
		context: typing.Optional[dict] = None,
		*,
		subject: typing.Optional[str] = None,
	) -> RiskVerdict:
		"""
		Run a single check.

		A check that cannot be evaluated results in WARNING with score 50.
		"""
		verdict = await self._run_check(check_type, input, context)
		if subject is not None:
			await self.AuditService.log_risk_verdict(subject, verdict.rest_get())
		return verdict


	async def evaluate_batch(self, checks: typing.List[dict], *, subject: typing.Optional[str] = None) -> BatchVerdict:
		"""
		Run the checks and fold their verdicts.

		Each item has `check_type`, `input` and optional `context`.
		A failing check is recorded as WARNING and never aborts the batch.
		"""
		verdicts = []
		for check in checks:
			verdict = await self._run_check(check.get("check_type"), check.get("input"), check.get("context"))
			verdicts.append(verdict)

		batch_verdict = fold_verdicts(verdicts, self.WarningThreshold)
		if subject is not None:
			await self.AuditService.log_risk_verdict(subject, batch_verdict.rest_get())
		return batch_verdict


	async def _run_check(self, check_type, input, context) -> RiskVerdict:
		try:
			check_type = CheckType(check_type)
		except ValueError:
			L.warning("Unknown risk check type", struct_data={"check_type": str(check_type)})
			return RiskVerdict(
				Check=None,
				Result=CheckResult.WARNING,
				Score=50,
				Reasons=["Unknown risk check type"],
			)

		check = CHECKS[check_type]
		try:
			context = dict(context or {})
			if check_type == CheckType.IP_REPUTATION and "reputation" not in context:
				context["reputation"] = await self._lookup_reputation(input)
			return check(input, context)
		except Exception as e:
			if check_type in SECRET_INPUT_CHECKS:
				# The traceback may carry the secret input
				L.error("Risk check {} failed: {}".format(check_type, e.__class__.__name__))
			else:
				L.exception("Risk check {} failed: {}".format(check_type, e.__class__.__name__))
			return RiskVerdict(
				Check=check_type,
				Result=CheckResult.WARNING,
				Score=50,
				Reasons=["Risk check could not be completed"],
			)


	async def _lookup_reputation(self, ip_address) -> typing.Optional[dict]:
		if self.ReputationClient is None or is_internal_address(str(ip_address)):
			return None
		return await self.ReputationClient.lookup(str(ip_address))
