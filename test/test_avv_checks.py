import datetime
import unittest

from onestepauth.avv import CheckResult
from onestepauth.avv.checks import (
	check_passcode_strength,
	check_passcode_personal_data,
	check_device_trust,
	check_device_fingerprint,
	check_biometric_quality,
	check_behavioral_pattern,
	check_login_frequency,
	check_ip_reputation,
	is_internal_address,
)

from virtual_authenticator import VirtualAuthenticator, b64url


CHROME_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0"


class PasscodeStrengthTestCase(unittest.TestCase):

	def test_common_sequence(self):
		verdict = check_passcode_strength("123456")
		self.assertEqual(verdict.Result, CheckResult.FAIL)
		self.assertEqual(verdict.Score, 0)
		self.assertIn("sequential", verdict.Metadata["findings"])
		self.assertIn("common", verdict.Metadata["findings"])


	def test_strong(self):
		verdict = check_passcode_strength("482917")
		self.assertEqual(verdict.Result, CheckResult.PASS)
		self.assertEqual(verdict.Score, 90)
		self.assertEqual(verdict.Reasons, [])


	def test_repeated_digit(self):
		verdict = check_passcode_strength("777777")
		self.assertEqual(verdict.Result, CheckResult.FAIL)
		self.assertIn("repeated", verdict.Metadata["findings"])


	def test_wrapping_sequence(self):
		verdict = check_passcode_strength("567890")
		self.assertEqual(verdict.Result, CheckResult.FAIL)
		self.assertEqual(verdict.Metadata["findings"], ["sequential"])


	def test_low_variety(self):
		verdict = check_passcode_strength("292929")
		self.assertEqual(verdict.Result, CheckResult.FAIL)
		self.assertEqual(verdict.Metadata["findings"], ["low_variety"])


	def test_three_distinct_digits(self):
		"""
		No pattern found, but also no bonus for variety
		"""
		verdict = check_passcode_strength("112244")
		self.assertEqual(verdict.Result, CheckResult.PASS)
		self.assertEqual(verdict.Score, 70)


	def test_format(self):
		for passcode in ("12345", "1234567", "12a456", "", None, 123456):
			verdict = check_passcode_strength(passcode)
			self.assertEqual(verdict.Result, CheckResult.FAIL)
			self.assertEqual(verdict.Score, 0)


class PasscodePersonalDataTestCase(unittest.TestCase):

	def test_date_of_birth(self):
		context = {"date_of_birth": "1990-05-15"}
		for passcode in ("150590", "051590", "900515", "199005", "415054"):
			verdict = check_passcode_personal_data(passcode, context)
			self.assertEqual(verdict.Result, CheckResult.FAIL, passcode)
			self.assertEqual(verdict.Score, 0)
			self.assertEqual(verdict.Metadata["matched"], ["date_of_birth"])

		verdict = check_passcode_personal_data("482917", context)
		self.assertEqual(verdict.Result, CheckResult.PASS)
		self.assertEqual(verdict.Score, 100)


	def test_phone_number(self):
		context = {"phone_number": "+1 (555) 867-5309"}
		verdict = check_passcode_personal_data("867512", context)
		self.assertEqual(verdict.Result, CheckResult.FAIL)
		self.assertEqual(verdict.Metadata["matched"], ["phone_number"])

		verdict = check_passcode_personal_data("482917", context)
		self.assertEqual(verdict.Result, CheckResult.PASS)


	def test_no_personal_data(self):
		verdict = check_passcode_personal_data("150590", {})
		self.assertEqual(verdict.Result, CheckResult.WARNING)
		self.assertEqual(verdict.Score, 50)

		verdict = check_passcode_personal_data("150590")
		self.assertEqual(verdict.Result, CheckResult.WARNING)


class DeviceTestCase(unittest.TestCase):

	def test_trusted_device(self):
		verdict = check_device_trust(
			{"fingerprint": "fp-1", "user_agent": CHROME_USER_AGENT},
			{"known_devices": [{"fingerprint": "fp-1", "trusted": True}]},
		)
		self.assertEqual(verdict.Result, CheckResult.PASS)
		self.assertEqual(verdict.Score, 90)
		self.assertTrue(verdict.Metadata["known"])


	def test_untrusted_device(self):
		verdict = check_device_trust(
			{"fingerprint": "fp-1", "user_agent": CHROME_USER_AGENT},
			{"known_devices": [{"fingerprint": "fp-1", "trusted": False}]},
		)
		self.assertEqual(verdict.Result, CheckResult.WARNING)
		self.assertEqual(verdict.Score, 30)


	def test_unknown_device(self):
		verdict = check_device_trust({"fingerprint": "fp-2", "user_agent": CHROME_USER_AGENT})
		self.assertEqual(verdict.Result, CheckResult.WARNING)
		self.assertEqual(verdict.Score, 50)
		self.assertFalse(verdict.Metadata["known"])


	def test_bot_user_agent(self):
		verdict = check_device_trust(
			{"fingerprint": "fp-1", "user_agent": "Mozilla/5.0 (compatible; Googlebot/2.1)"},
			{"known_devices": [{"fingerprint": "fp-1", "trusted": True}]},
		)
		self.assertEqual(verdict.Result, CheckResult.FAIL)
		self.assertEqual(verdict.Score, 0)


	def test_unusual_user_agent(self):
		verdict = check_device_trust({"fingerprint": "fp-2", "user_agent": "curl/8.4.0"})
		self.assertEqual(verdict.Score, 30)
		self.assertIn("Unusual browser signature", verdict.Reasons)


	def test_fingerprint(self):
		context = {"trusted_fingerprints": ["fp-1", "fp-2"]}
		verdict = check_device_fingerprint("fp-2", context)
		self.assertEqual(verdict.Result, CheckResult.PASS)
		self.assertEqual(verdict.Score, 95)

		verdict = check_device_fingerprint("fp-3", context)
		self.assertEqual(verdict.Result, CheckResult.WARNING)
		self.assertEqual(verdict.Score, 50)
		self.assertEqual(verdict.Reasons, ["New device detected - please verify"])


class BiometricQualityTestCase(unittest.TestCase):

	def setUp(self):
		self.Authenticator = VirtualAuthenticator()


	def _biometric(self, flags):
		return {
			"credential_id": b64url(self.Authenticator.CredentialId),
			"public_key": b64url(self.Authenticator.cose_public_key()),
			"authenticator_data": b64url(self.Authenticator.authenticator_data(flags)),
		}


	def test_user_verified(self):
		verdict = check_biometric_quality(self._biometric(VirtualAuthenticator.FLAG_UP | VirtualAuthenticator.FLAG_UV))
		self.assertEqual(verdict.Result, CheckResult.PASS)
		self.assertEqual(verdict.Score, 100)
		self.assertTrue(verdict.Metadata["user_verified"])


	def test_user_not_verified(self):
		verdict = check_biometric_quality(self._biometric(VirtualAuthenticator.FLAG_UP))
		self.assertEqual(verdict.Result, CheckResult.PASS)
		self.assertEqual(verdict.Score, 80)
		self.assertEqual(verdict.Reasons, ["Enable biometric user verification on the device"])


	def test_user_not_present(self):
		verdict = check_biometric_quality(self._biometric(0))
		self.assertEqual(verdict.Result, CheckResult.FAIL)
		self.assertEqual(verdict.Score, 0)


	def test_incomplete(self):
		biometric = self._biometric(VirtualAuthenticator.FLAG_UP | VirtualAuthenticator.FLAG_UV)
		del biometric["authenticator_data"]
		verdict = check_biometric_quality(biometric)
		self.assertEqual(verdict.Result, CheckResult.WARNING)
		self.assertEqual(verdict.Score, 70)

		verdict = check_biometric_quality({})
		self.assertEqual(verdict.Result, CheckResult.FAIL)
		self.assertEqual(verdict.Score, 0)


	def test_invalid_authenticator_data(self):
		biometric = self._biometric(VirtualAuthenticator.FLAG_UP)
		biometric["authenticator_data"] = b64url(b"short")
		verdict = check_biometric_quality(biometric)
		self.assertEqual(verdict.Score, 70)
		self.assertIn("Authenticator data could not be decoded", verdict.Reasons)


class BehaviorTestCase(unittest.TestCase):

	def setUp(self):
		self.LoginTime = datetime.datetime(2024, 3, 20, 9, 30, tzinfo=datetime.timezone.utc)
		self.History = [
			{"login_time": (self.LoginTime - datetime.timedelta(days=day)).isoformat(), "success": True}
			for day in range(1, 11)
		]


	def test_short_history(self):
		verdict = check_behavioral_pattern(
			{"login_time": self.LoginTime.isoformat()},
			{"history": self.History[:4]},
		)
		self.assertEqual(verdict.Result, CheckResult.PASS)
		self.assertEqual(verdict.Score, 80)
		self.assertFalse(verdict.Metadata["analyzed"])


	def test_usual_hour(self):
		verdict = check_behavioral_pattern({"login_time": self.LoginTime.isoformat()}, {"history": self.History})
		self.assertEqual(verdict.Result, CheckResult.PASS)
		self.assertEqual(verdict.Score, 80)
		self.assertTrue(verdict.Metadata["analyzed"])


	def test_unusual_hour(self):
		login_time = self.LoginTime.replace(hour=3)
		verdict = check_behavioral_pattern({"login_time": login_time.isoformat()}, {"history": self.History})
		self.assertEqual(verdict.Score, 65)
		self.assertEqual(verdict.Reasons, ["Unusual login time detected"])


	def test_recent_failures(self):
		history = self.History + [
			{"login_time": (self.LoginTime - datetime.timedelta(hours=hours)).isoformat(), "success": False}
			for hours in (1, 2, 3, 4)
		]
		verdict = check_behavioral_pattern({"login_time": self.LoginTime.isoformat()}, {"history": history})
		self.assertEqual(verdict.Result, CheckResult.WARNING)
		self.assertEqual(verdict.Metadata["recent_failures"], 4)
		self.assertIn("Multiple recent failed attempts", verdict.Reasons)


	def test_naive_timestamp(self):
		verdict = check_behavioral_pattern(
			{"login_time": "2024-03-20T09:30:00"},
			{"history": self.History},
		)
		self.assertEqual(verdict.Score, 80)


class LoginFrequencyTestCase(unittest.TestCase):

	def setUp(self):
		self.Now = datetime.datetime(2024, 3, 20, 12, 0, tzinfo=datetime.timezone.utc)


	def _attempts(self, count, minutes_apart=5, ip_address="198.51.100.7", success=True, offset=0):
		return [
			{
				"timestamp": (self.Now - datetime.timedelta(minutes=offset + i * minutes_apart)).isoformat(),
				"ip_address": ip_address,
				"success": success,
			}
			for i in range(count)
		]


	def _check(self, recent_attempts):
		return check_login_frequency(
			{"timestamp": self.Now.isoformat(), "ip_address": "198.51.100.7"},
			{"recent_attempts": recent_attempts},
		)


	def test_normal(self):
		verdict = self._check(self._attempts(3))
		self.assertEqual(verdict.Result, CheckResult.PASS)
		self.assertEqual(verdict.Score, 100)


	def test_high_frequency(self):
		verdict = self._check(self._attempts(6))
		self.assertEqual(verdict.Result, CheckResult.WARNING)
		self.assertEqual(verdict.Score, 40)


	def test_too_many_attempts(self):
		verdict = self._check(self._attempts(11))
		self.assertEqual(verdict.Result, CheckResult.FAIL)
		self.assertEqual(verdict.Score, 0)


	def test_other_addresses_ignored(self):
		verdict = self._check(self._attempts(11, ip_address="192.0.2.1"))
		self.assertEqual(verdict.Result, CheckResult.PASS)
		self.assertEqual(verdict.Metadata["hourly_attempts"], 0)


	def test_daily_failures(self):
		"""
		Failures spread over the day, below the hourly limit
		"""
		verdict = self._check(self._attempts(21, minutes_apart=30, success=False, offset=120))
		self.assertEqual(verdict.Metadata["hourly_attempts"], 0)
		self.assertEqual(verdict.Metadata["daily_failures"], 21)
		self.assertEqual(verdict.Result, CheckResult.FAIL)


class NetworkTestCase(unittest.TestCase):

	def test_internal_address(self):
		self.assertTrue(is_internal_address("10.0.0.1"))
		self.assertTrue(is_internal_address("127.0.0.1"))
		self.assertTrue(is_internal_address("fe80::1"))
		self.assertFalse(is_internal_address("8.8.8.8"))
		with self.assertRaises(ValueError):
			is_internal_address("not-an-address")


	def test_private_address(self):
		verdict = check_ip_reputation("192.168.1.10")
		self.assertEqual(verdict.Result, CheckResult.PASS)
		self.assertEqual(verdict.Score, 80)
		self.assertEqual(verdict.Metadata["type"], "private")


	def test_reputation_unavailable(self):
		verdict = check_ip_reputation("8.8.8.8", {"reputation": None})
		self.assertEqual(verdict.Result, CheckResult.WARNING)
		self.assertEqual(verdict.Score, 50)


	def test_reputation(self):
		verdict = check_ip_reputation("8.8.8.8", {"reputation": {"threat_score": 10, "country": "US"}})
		self.assertEqual(verdict.Result, CheckResult.PASS)
		self.assertEqual(verdict.Score, 90)
		self.assertEqual(verdict.Metadata["country"], "US")

		verdict = check_ip_reputation("8.8.8.8", {"reputation": {"threat_score": 50}})
		self.assertEqual(verdict.Result, CheckResult.WARNING)
		self.assertEqual(verdict.Score, 50)

		verdict = check_ip_reputation("8.8.8.8", {"reputation": {"threat_score": 80}})
		self.assertEqual(verdict.Result, CheckResult.FAIL)
		self.assertEqual(verdict.Score, 20)


if __name__ == "__main__":
	unittest.main()
