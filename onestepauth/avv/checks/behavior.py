import collections
import datetime
import typing

from ..codes import CheckResult, CheckType
from ..verdict import RiskVerdict


def parse_timestamp(value) -> datetime.datetime:
	"""
	Parse an ISO 8601 timestamp. Naive timestamps are taken as UTC.
	"""
	if isinstance(value, datetime.datetime):
		dt = value
	else:
		dt = datetime.datetime.fromisoformat(str(value))
	if dt.tzinfo is None:
		dt = dt.replace(tzinfo=datetime.timezone.utc)
	return dt.astimezone(datetime.timezone.utc)


def check_behavioral_pattern(behavior: dict, context: typing.Optional[dict] = None) -> RiskVerdict:
	"""
	Compare the login hour with the subject's login history.

	Input: `login_time`
	Context: `history`, a list of `{"login_time": ..., "success": bool}`

	The trailing 24 hours are counted back from `login_time`. Hours are compared in UTC.
	"""
	context = context or {}
	history = context.get("history") or []

	if len(history) < 5:
		return RiskVerdict(
			Check=CheckType.BEHAVIORAL_PATTERN,
			Result=CheckResult.PASS,
			Score=80,
			Metadata={"analyzed": False},
		)

	login_time = parse_timestamp(behavior["login_time"])
	score = 80
	result = CheckResult.PASS
	reasons = []

	hour_counts = collections.Counter(parse_timestamp(entry["login_time"]).hour for entry in history)
	average_hour_count = sum(hour_counts.values()) / 24
	if hour_counts.get(login_time.hour, 0) < average_hour_count * 0.1:
		score -= 15
		reasons.append("Unusual login time detected")

	since = login_time - datetime.timedelta(hours=24)
	recent_failures = sum(
		1 for entry in history
		if not entry.get("success") and since < parse_timestamp(entry["login_time"]) <= login_time
	)
	if recent_failures >= 4:
		score -= 20
		result = CheckResult.WARNING
		reasons.append("Multiple recent failed attempts")

	return RiskVerdict(
		Check=CheckType.BEHAVIORAL_PATTERN,
		Result=result,
		Score=score,
		Reasons=reasons,
		Metadata={"analyzed": True, "recent_failures": recent_failures},
	)


def check_login_frequency(attempt: dict, context: typing.Optional[dict] = None) -> RiskVerdict:
	"""
	Rate check of login attempts from one network address.

	Input: `timestamp`, `ip_address`
	Context: `recent_attempts`, a list of `{"timestamp": ..., "ip_address": ..., "success": bool}`
	"""
	context = context or {}
	recent_attempts = context.get("recent_attempts") or []

	now = parse_timestamp(attempt["timestamp"])
	ip_address = attempt.get("ip_address")
	one_hour_ago = now - datetime.timedelta(hours=1)
	one_day_ago = now - datetime.timedelta(hours=24)

	from_address = [
		(parse_timestamp(entry["timestamp"]), entry)
		for entry in recent_attempts
		if entry.get("ip_address") == ip_address
	]
	hourly_count = sum(1 for timestamp, _ in from_address if timestamp > one_hour_ago)
	failed_count = sum(
		1 for timestamp, entry in from_address
		if timestamp > one_day_ago and not entry.get("success")
	)

	result = CheckResult.PASS
	score = 100
	reasons = []

	if hourly_count > 10:
		result = CheckResult.FAIL
		score = 0
		reasons.append("Too many attempts from this network address")
	elif hourly_count > 5:
		result = CheckResult.WARNING
		score = 40
		reasons.append("High frequency login attempts")

	if failed_count > 20:
		result = CheckResult.FAIL
		score = 0
		reasons.append("Too many failed attempts")

	return RiskVerdict(
		Check=CheckType.LOGIN_FREQUENCY,
		Result=result,
		Score=score,
		Reasons=reasons,
		Metadata={"hourly_attempts": hourly_count, "daily_failures": failed_count},
	)
