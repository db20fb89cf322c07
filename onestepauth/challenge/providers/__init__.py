from .abc import ChallengeProviderABC
from .dictionary import DictChallengeProvider
from .mongodb import MongoDBChallengeProvider

__all__ = [
	"ChallengeProviderABC",
	"DictChallengeProvider",
	"MongoDBChallengeProvider",
]
