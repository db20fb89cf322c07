from .outcome import CeremonyOutcome, CeremonyState, LoginMethod, RejectReason
from .service import CeremonyService
from .handler import CeremonyHandler

__all__ = [
	"CeremonyOutcome",
	"CeremonyState",
	"LoginMethod",
	"RejectReason",
	"CeremonyService",
	"CeremonyHandler",
]
