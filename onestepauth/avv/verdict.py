import dataclasses
import typing

from .codes import CheckResult, CheckType


@dataclasses.dataclass
class RiskVerdict:
	Check: typing.Optional[CheckType]
	Result: CheckResult
	Score: int
	Reasons: typing.List[str] = dataclasses.field(default_factory=list)
	Metadata: dict = dataclasses.field(default_factory=dict)

	def __post_init__(self):
		self.Score = max(0, min(100, int(self.Score)))

	def rest_get(self) -> dict:
		return {
			"check_type": str(self.Check) if self.Check is not None else None,
			"result": str(self.Result),
			"score": self.Score,
			"reasons": list(self.Reasons),
			"metadata": dict(self.Metadata),
		}


@dataclasses.dataclass
class BatchVerdict:
	Result: CheckResult
	Score: float
	Verdicts: typing.List[RiskVerdict]
	Reasons: typing.List[str]

	def rest_get(self) -> dict:
		return {
			"result": str(self.Result),
			"score": self.Score,
			"checks": [verdict.rest_get() for verdict in self.Verdicts],
			"reasons": list(self.Reasons),
		}


def fold_verdicts(verdicts: typing.Sequence[RiskVerdict], warning_threshold: int = 70) -> BatchVerdict:
	"""
	Combine individual verdicts into one.

	FAIL if any verdict fails, WARNING if the mean score is below the threshold, PASS otherwise.
	Reasons are merged without duplicates, in the order they first appear.
	"""
	if len(verdicts) == 0:
		raise ValueError("Cannot fold an empty list of verdicts")

	mean_score = sum(verdict.Score for verdict in verdicts) / len(verdicts)

	if any(verdict.Result == CheckResult.FAIL for verdict in verdicts):
		result = CheckResult.FAIL
	elif mean_score < warning_threshold:
		result = CheckResult.WARNING
	else:
		result = CheckResult.PASS

	reasons = []
	for verdict in verdicts:
		for reason in verdict.Reasons:
			if reason not in reasons:
				reasons.append(reason)

	return BatchVerdict(Result=result, Score=round(mean_score, 1), Verdicts=list(verdicts), Reasons=reasons)
