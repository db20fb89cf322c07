from .challenge import Challenge, ChallengePurpose
from .service import ChallengeService

__all__ = [
	"Challenge",
	"ChallengePurpose",
	"ChallengeService",
]
