import datetime
import unittest
import unittest.mock

from onestepauth import exceptions
from onestepauth.audit import AuditCode, RiskLevel
from onestepauth.avv import CheckResult, RiskService
from onestepauth.ceremony import LoginMethod, RejectReason
from onestepauth.passcode import PasscodeService

from virtual_authenticator import make_app


class FakeUpsertor:

	def __init__(self, storage, collection, obj_id, version):
		self.Storage = storage
		self.Collection = collection
		self.ObjId = obj_id
		self.Version = version
		self.ModSet = {}
		self.ModUnset = set()

	def set(self, key, value):
		self.ModSet[key] = value

	def unset(self, key):
		self.ModUnset.add(key)

	async def execute(self, event_type=None):
		collection = self.Storage.Collections.setdefault(self.Collection, {})
		obj = collection.get(self.ObjId)
		if self.Version == 0:
			assert obj is None, "Object already exists"
			obj = {"_id": self.ObjId, "_v": 0}
		else:
			assert obj is not None and obj["_v"] == self.Version, "Version conflict"
		obj.update(self.ModSet)
		for key in self.ModUnset:
			obj.pop(key, None)
		obj["_v"] += 1
		collection[self.ObjId] = obj
		return self.ObjId


class FakeStorage:
	"""
	In-memory stand-in for asab.StorageService
	"""

	def __init__(self):
		self.Collections = {}

	def upsertor(self, collection, obj_id=None, version=0):
		return FakeUpsertor(self, collection, obj_id, version)

	async def get(self, collection, obj_id):
		return dict(self.Collections.get(collection, {})[obj_id])

	async def delete(self, collection, obj_id):
		del self.Collections.get(collection, {})[obj_id]


class PasscodeServiceTestCase(unittest.IsolatedAsyncioTestCase):
	maxDiff = None

	def setUp(self):
		self.App, self.Services = make_app()
		self.Storage = FakeStorage()
		self.AuditService = unittest.mock.AsyncMock()
		self.Services["asab.StorageService"] = self.Storage
		self.Services["onestepauth.AuditService"] = self.AuditService
		self.Services["onestepauth.RiskService"] = RiskService(self.App)
		self.PasscodeService = PasscodeService(self.App)


	def _stored(self, owner_id):
		return self.Storage.Collections.get("pc", {}).get(owner_id)


	def _audit_codes(self):
		return [c.args[0] for c in self.AuditService.log_security_event.call_args_list]


	async def test_weak_passcode(self):
		with self.assertRaises(exceptions.WeakPasscodeError) as cm:
			await self.PasscodeService.create_passcode("alice", "123456")

		self.assertEqual(cm.exception.Verdict["result"], "FAIL")
		self.assertIsNone(self._stored("alice"))
		self.assertIn(AuditCode.PASSCODE_REJECTED, self._audit_codes())


	async def test_passcode_from_date_of_birth(self):
		"""
		A strong-looking passcode is rejected when it is derived from the date of birth
		"""
		with self.assertRaises(exceptions.WeakPasscodeError) as cm:
			await self.PasscodeService.create_passcode("alice", "150590", profile={"date_of_birth": "1990-05-15"})

		self.assertIn("Passcode cannot contain your birth date", cm.exception.Verdict["reasons"])
		self.assertIsNone(self._stored("alice"))


	async def test_create_and_verify(self):
		verdict = await self.PasscodeService.create_passcode("alice", "482917", profile={"date_of_birth": "1990-05-15"})
		self.assertEqual(verdict.Result, CheckResult.PASS)

		stored = self._stored("alice")
		self.assertNotEqual(stored["__ph"], "482917")
		self.assertTrue(stored["__ph"].startswith("$argon2"))
		self.assertEqual(stored["fa"], 0)

		outcome = await self.PasscodeService.verify_passcode("alice", "482917")
		self.assertTrue(outcome.Verified)
		self.assertEqual(outcome.Method, LoginMethod.PASSCODE)
		self.App.PubSub.publish.assert_called_with(
			"OneStep.authenticated!", owner_id="alice", login_method="passcode")


	async def test_create_twice(self):
		await self.PasscodeService.create_passcode("alice", "482917")
		with self.assertRaises(exceptions.PasscodeExistsError):
			await self.PasscodeService.create_passcode("alice", "539176")


	async def test_wrong_passcode(self):
		await self.PasscodeService.create_passcode("alice", "482917")

		outcome = await self.PasscodeService.verify_passcode("alice", "000000")
		self.assertFalse(outcome.Verified)
		self.assertEqual(outcome.Reason, RejectReason.PASSCODE_INVALID)
		self.assertTrue(outcome.Retryable)
		self.assertEqual(self._stored("alice")["fa"], 1)

		# Success resets the failure counter
		self.assertTrue((await self.PasscodeService.verify_passcode("alice", "482917")).Verified)
		self.assertEqual(self._stored("alice")["fa"], 0)


	async def test_lockout(self):
		await self.PasscodeService.create_passcode("alice", "482917")

		for _ in range(4):
			outcome = await self.PasscodeService.verify_passcode("alice", "000000")
			self.assertEqual(outcome.Reason, RejectReason.PASSCODE_INVALID)

		outcome = await self.PasscodeService.verify_passcode("alice", "000000")
		self.assertEqual(outcome.Reason, RejectReason.PASSCODE_LOCKED)
		self.assertFalse(outcome.Retryable)
		self.assertIn(AuditCode.PASSCODE_LOCKED, self._audit_codes())
		self.assertEqual(
			self.AuditService.log_security_event.await_args.args,
			(AuditCode.PASSCODE_LOCKED, RiskLevel.HIGH),
		)

		# Even the correct passcode is refused while locked
		outcome = await self.PasscodeService.verify_passcode("alice", "482917")
		self.assertEqual(outcome.Reason, RejectReason.PASSCODE_LOCKED)


	async def test_lockout_expired(self):
		await self.PasscodeService.create_passcode("alice", "482917")
		stored = self._stored("alice")
		stored["lu"] = datetime.datetime.now(datetime.timezone.utc) - datetime.timedelta(minutes=1)

		outcome = await self.PasscodeService.verify_passcode("alice", "482917")
		self.assertTrue(outcome.Verified)
		self.assertNotIn("lu", self._stored("alice"))


	async def test_not_set(self):
		outcome = await self.PasscodeService.verify_passcode("alice", "482917")
		self.assertEqual(outcome.Reason, RejectReason.PASSCODE_NOT_SET)


	async def test_delete(self):
		await self.PasscodeService.create_passcode("alice", "482917")
		await self.PasscodeService.delete_passcode("alice")
		self.assertIsNone(self._stored("alice"))

		with self.assertRaises(KeyError):
			await self.PasscodeService.delete_passcode("alice")


if __name__ == "__main__":
	unittest.main()
