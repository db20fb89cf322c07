from .abc import RegistryProviderABC
from .dictionary import DictRegistryProvider
from .mongodb import MongoDBRegistryProvider

__all__ = [
	"RegistryProviderABC",
	"DictRegistryProvider",
	"MongoDBRegistryProvider",
]
