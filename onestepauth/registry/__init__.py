from .credential import Credential, DeviceClass
from .service import RegistryService
from .handler import RegistryHandler

__all__ = [
	"Credential",
	"DeviceClass",
	"RegistryService",
	"RegistryHandler",
]
