import datetime
import re
import typing

from ..codes import CheckResult, CheckType
from ..verdict import RiskVerdict


PASSCODE_RE = re.compile(r"^[0-9]{6}$")

# Ascending and descending digit runs, including the wrap-around windows "567890" and "432109"
SEQUENCES = ("01234567890", "98765432109")

DENYLIST = frozenset({
	"000000", "111111", "123456", "654321", "000001", "123123",
	"696969", "121212", "112233", "102030", "123321", "666666",
	"456456", "147258", "159357", "246810", "369258",
})


def check_passcode_strength(passcode, context: typing.Optional[dict] = None) -> RiskVerdict:
	"""
	Score a 6-digit passcode.

	Starts at 50, +20 for the correct format, -30 for a sequential run, -40 for a single
	repeated digit, -50 for a commonly chosen code, -20 for two or fewer distinct digits.
	+20 for four or more distinct digits unless a pattern was found.
	Any negative finding fails the check.
	"""
	if not isinstance(passcode, str) or PASSCODE_RE.match(passcode) is None:
		return RiskVerdict(
			Check=CheckType.PASSCODE_STRENGTH,
			Result=CheckResult.FAIL,
			Score=0,
			Reasons=["Passcode must consist of exactly 6 digits"],
		)

	score = 50 + 20
	reasons = []
	findings = []

	if any(passcode in sequence for sequence in SEQUENCES):
		score -= 30
		findings.append("sequential")
		reasons.append("Avoid sequential digits")

	if len(set(passcode)) == 1:
		score -= 40
		findings.append("repeated")
		reasons.append("Avoid repeating a single digit")

	if passcode in DENYLIST:
		score -= 50
		findings.append("common")
		reasons.append("This passcode is too common")

	distinct_digits = len(set(passcode))
	if distinct_digits <= 2:
		score -= 20
		findings.append("low_variety")
		reasons.append("Use more different digits")
	elif distinct_digits >= 4 and len(findings) == 0:
		score += 20

	score = max(0, min(100, score))
	if score < 60 or len(findings) > 0:
		result = CheckResult.FAIL
	else:
		result = CheckResult.PASS

	return RiskVerdict(
		Check=CheckType.PASSCODE_STRENGTH,
		Result=result,
		Score=score,
		Reasons=reasons,
		Metadata={"findings": findings, "distinct_digits": distinct_digits},
	)


def check_passcode_personal_data(passcode, context: typing.Optional[dict] = None) -> RiskVerdict:
	"""
	Fail the passcode if it contains digits derived from the date of birth or the phone number.

	Context keys: `date_of_birth` (ISO date) and `phone_number`.
	"""
	context = context or {}
	date_of_birth = context.get("date_of_birth")
	phone_number = context.get("phone_number")

	if not date_of_birth and not phone_number:
		return RiskVerdict(
			Check=CheckType.PASSCODE_PERSONAL_DATA,
			Result=CheckResult.WARNING,
			Score=50,
			Reasons=["Passcode could not be compared with personal data"],
		)

	passcode = str(passcode)
	reasons = []
	matched = []

	if date_of_birth:
		if any(fragment in passcode for fragment in date_fragments(date_of_birth)):
			matched.append("date_of_birth")
			reasons.append("Passcode cannot contain your birth date")

	if phone_number:
		if any(fragment in passcode for fragment in phone_fragments(phone_number)):
			matched.append("phone_number")
			reasons.append("Passcode cannot contain phone number digits")

	if len(matched) > 0:
		return RiskVerdict(
			Check=CheckType.PASSCODE_PERSONAL_DATA,
			Result=CheckResult.FAIL,
			Score=0,
			Reasons=reasons,
			Metadata={"matched": matched},
		)

	return RiskVerdict(
		Check=CheckType.PASSCODE_PERSONAL_DATA,
		Result=CheckResult.PASS,
		Score=100,
	)


def date_fragments(date_of_birth: str | datetime.date) -> typing.Set[str]:
	"""
	4 to 6 digit strings derivable from a date of birth
	"""
	if isinstance(date_of_birth, datetime.datetime):
		date_of_birth = date_of_birth.date()
	elif not isinstance(date_of_birth, datetime.date):
		date_of_birth = datetime.date.fromisoformat(str(date_of_birth)[:10])

	dd = "{:02d}".format(date_of_birth.day)
	mm = "{:02d}".format(date_of_birth.month)
	yyyy = "{:04d}".format(date_of_birth.year)
	yy = yyyy[-2:]

	fragments = {
		dd + mm, mm + dd,
		dd + mm + yy, mm + dd + yy, yy + mm + dd, yy + dd + mm,
		dd + yy, mm + yy, yy + mm,
		yyyy,
	}
	for full in (dd + mm + yyyy, mm + dd + yyyy, yyyy + mm + dd):
		for i in range(len(full) - 5):
			fragments.add(full[i:i + 6])
	return fragments


def phone_fragments(phone_number: str) -> typing.Set[str]:
	"""
	All 4-digit windows of the phone number
	"""
	digits = re.sub(r"\D", "", str(phone_number))
	return {digits[i:i + 4] for i in range(len(digits) - 3)}
