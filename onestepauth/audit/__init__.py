from .codes import AuditCode, RiskLevel
from .service import AuditService

__all__ = [
	"AuditCode",
	"RiskLevel",
	"AuditService",
]
