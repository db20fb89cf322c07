from .codes import CheckResult, CheckType
from .verdict import BatchVerdict, RiskVerdict, fold_verdicts
from .service import RiskService
from .handler import RiskHandler

__all__ = [
	"CheckResult",
	"CheckType",
	"BatchVerdict",
	"RiskVerdict",
	"fold_verdicts",
	"RiskService",
	"RiskHandler",
]
