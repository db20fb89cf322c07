from .service import PasscodeService
from .handler import PasscodeHandler

__all__ = [
	"PasscodeService",
	"PasscodeHandler",
]
