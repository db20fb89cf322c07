import ipaddress
import typing

from ..codes import CheckResult, CheckType
from ..verdict import RiskVerdict


def is_internal_address(ip_address: str) -> bool:
	"""
	Private, loopback and link-local addresses. Raises ValueError for an invalid address.
	"""
	address = ipaddress.ip_address(ip_address.strip())
	return address.is_private or address.is_loopback or address.is_link_local


def check_ip_reputation(ip_address, context: typing.Optional[dict] = None) -> RiskVerdict:
	"""
	Score a network address.

	Context: `reputation`, the reputation lookup result with a `threat_score` (0 to 100),
	or None if the lookup is not available.
	"""
	context = context or {}

	if is_internal_address(str(ip_address)):
		return RiskVerdict(
			Check=CheckType.IP_REPUTATION,
			Result=CheckResult.PASS,
			Score=80,
			Metadata={"type": "private"},
		)

	reputation = context.get("reputation")
	if reputation is None:
		return RiskVerdict(
			Check=CheckType.IP_REPUTATION,
			Result=CheckResult.WARNING,
			Score=50,
			Reasons=["Network reputation could not be verified"],
			Metadata={"type": "public"},
		)

	threat_score = max(0, min(100, int(reputation.get("threat_score", 0))))
	score = 100 - threat_score
	metadata = {"type": "public", "threat_score": threat_score}
	for key in ("country", "region", "city", "isp"):
		if key in reputation:
			metadata[key] = reputation[key]

	if score >= 70:
		return RiskVerdict(Check=CheckType.IP_REPUTATION, Result=CheckResult.PASS, Score=score, Metadata=metadata)
	elif score >= 40:
		return RiskVerdict(
			Check=CheckType.IP_REPUTATION,
			Result=CheckResult.WARNING,
			Score=score,
			Reasons=["Network address has a questionable reputation"],
			Metadata=metadata,
		)
	else:
		return RiskVerdict(
			Check=CheckType.IP_REPUTATION,
			Result=CheckResult.FAIL,
			Score=score,
			Reasons=["Network address has a poor reputation"],
			Metadata=metadata,
		)
