import datetime
import logging
import typing

import asab
import asab.storage.exceptions

from ..audit import AuditCode, RiskLevel
from ..avv import BatchVerdict, CheckResult, CheckType
from ..ceremony.outcome import CeremonyOutcome, LoginMethod, RejectReason
from ..events import EventTypes
from .. import exceptions, generic

#

L = logging.getLogger(__name__)

#


asab.Config.add_defaults({
	"onestepauth:passcode": {
		# Consecutive failed verifications that lock the passcode
		"max_failed_attempts": 5,
		"lockout_duration": "24 h",
	}
})


class PasscodeService(asab.Service):
	"""
	6-digit passcode enrollment and verification

	Document:
		_id: owner ID
		__ph: argon2 hash of the passcode
		fa: number of consecutive failed verifications
		lu: locked until
	"""

	PasscodeCollection = "pc"

	def __init__(self, app, service_name="onestepauth.PasscodeService"):
		super().__init__(app, service_name)
		self.StorageService = app.get_service("asab.StorageService")
		self.RiskService = app.get_service("onestepauth.RiskService")
		self.AuditService = app.get_service("onestepauth.AuditService")

		self.MaxFailedAttempts = asab.Config.getint("onestepauth:passcode", "max_failed_attempts")
		self.LockoutDuration = datetime.timedelta(
			seconds=asab.Config.getseconds("onestepauth:passcode", "lockout_duration"))


	async def create_passcode(self, owner_id: str, passcode: str, profile: typing.Optional[dict] = None) -> BatchVerdict:
		"""
		Evaluate the passcode with the risk engine and store its hash.

		Raises PasscodeExistsError if the owner already has a passcode,
		WeakPasscodeError (carrying the verdict) if the risk engine rejects it.
		"""
		if await self._get(owner_id) is not None:
			raise exceptions.PasscodeExistsError(owner_id)

		verdict = await self.RiskService.evaluate_batch([
			{"check_type": CheckType.PASSCODE_STRENGTH, "input": passcode},
			{"check_type": CheckType.PASSCODE_PERSONAL_DATA, "input": passcode, "context": profile or {}},
		], subject=owner_id)

		if verdict.Result == CheckResult.FAIL:
			await self.AuditService.log_security_event(
				AuditCode.PASSCODE_REJECTED, RiskLevel.LOW,
				owner_id=owner_id, score=verdict.Score)
			raise exceptions.WeakPasscodeError(verdict.rest_get())

		upsertor = self.StorageService.upsertor(self.PasscodeCollection, obj_id=owner_id, version=0)
		upsertor.set("__ph", generic.argon2_hash(passcode))
		upsertor.set("fa", 0)
		try:
			await upsertor.execute(event_type=EventTypes.PASSCODE_CREATED)
		except asab.storage.exceptions.DuplicateError as e:
			raise exceptions.PasscodeExistsError(owner_id) from e

		L.log(asab.LOG_NOTICE, "Passcode created", struct_data={"oid": owner_id})
		await self.AuditService.log_security_event(AuditCode.PASSCODE_CREATED, RiskLevel.LOW, owner_id=owner_id)
		return verdict


	async def verify_passcode(self, owner_id: str, passcode: str) -> CeremonyOutcome:
		"""
		Verify the passcode.

		The passcode gets locked after too many consecutive failures.
		"""
		obj = await self._get(owner_id)
		if obj is None:
			await self.AuditService.log_security_event(
				AuditCode.LOGIN_FAILED, RiskLevel.MEDIUM,
				owner_id=owner_id, reason=str(RejectReason.PASSCODE_NOT_SET), lm=str(LoginMethod.PASSCODE))
			return CeremonyOutcome.rejected(RejectReason.PASSCODE_NOT_SET)

		now = datetime.datetime.now(datetime.timezone.utc)
		locked_until = _as_utc(obj.get("lu"))
		if locked_until is not None and locked_until > now:
			L.log(asab.LOG_NOTICE, "Passcode is locked", struct_data={"oid": owner_id, "until": locked_until})
			return CeremonyOutcome.rejected(RejectReason.PASSCODE_LOCKED)

		if generic.argon2_verify(obj["__ph"], passcode):
			if obj.get("fa", 0) > 0 or "lu" in obj:
				upsertor = self.StorageService.upsertor(self.PasscodeCollection, obj_id=owner_id, version=obj["_v"])
				upsertor.set("fa", 0)
				upsertor.unset("lu")
				await upsertor.execute(event_type=EventTypes.PASSCODE_UPDATED)

			await self.AuditService.log_security_event(
				AuditCode.LOGIN_SUCCESS, RiskLevel.LOW,
				owner_id=owner_id, lm=str(LoginMethod.PASSCODE))
			self.App.PubSub.publish(
				"OneStep.authenticated!",
				owner_id=owner_id,
				login_method=str(LoginMethod.PASSCODE),
			)
			return CeremonyOutcome.verified(owner_id, LoginMethod.PASSCODE)

		failed_attempts = obj.get("fa", 0) + 1
		upsertor = self.StorageService.upsertor(self.PasscodeCollection, obj_id=owner_id, version=obj["_v"])
		if failed_attempts >= self.MaxFailedAttempts:
			locked_until = now + self.LockoutDuration
			upsertor.set("fa", 0)
			upsertor.set("lu", locked_until)
			await upsertor.execute(event_type=EventTypes.PASSCODE_UPDATED)
			await self.AuditService.log_security_event(
				AuditCode.PASSCODE_LOCKED, RiskLevel.HIGH,
				owner_id=owner_id, attempts=failed_attempts, until=locked_until.isoformat())
			return CeremonyOutcome.rejected(RejectReason.PASSCODE_LOCKED)

		upsertor.set("fa", failed_attempts)
		await upsertor.execute(event_type=EventTypes.PASSCODE_UPDATED)
		await self.AuditService.log_security_event(
			AuditCode.LOGIN_FAILED, RiskLevel.LOW,
			owner_id=owner_id, reason=str(RejectReason.PASSCODE_INVALID), lm=str(LoginMethod.PASSCODE),
			attempts=failed_attempts)
		return CeremonyOutcome.rejected(RejectReason.PASSCODE_INVALID)


	async def delete_passcode(self, owner_id: str):
		"""
		Raises KeyError if the owner has no passcode
		"""
		await self.StorageService.delete(self.PasscodeCollection, owner_id)
		L.log(asab.LOG_NOTICE, "Passcode deleted", struct_data={"oid": owner_id})
		await self.AuditService.log_security_event(AuditCode.PASSCODE_DELETED, RiskLevel.MEDIUM, owner_id=owner_id)


	async def _get(self, owner_id: str) -> typing.Optional[dict]:
		try:
			return await self.StorageService.get(self.PasscodeCollection, owner_id)
		except KeyError:
			return None


def _as_utc(value: typing.Optional[datetime.datetime]) -> typing.Optional[datetime.datetime]:
	if value is not None and value.tzinfo is None:
		return value.replace(tzinfo=datetime.timezone.utc)
	return value
