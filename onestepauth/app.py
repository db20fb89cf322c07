import logging

import asab
import asab.web
import asab.metrics
import asab.web.rest
import asab.storage

#

L = logging.getLogger(__name__)

#


class OneStepAuthApplication(asab.Application):

	def __init__(self):
		super().__init__()

		# Load modules
		self.add_module(asab.web.Module)
		self.add_module(asab.storage.Module)
		self.add_module(asab.metrics.Module)

		# Locate web service
		self.WebService = self.get_service("asab.WebService")

		self.WebContainer = asab.web.WebContainer(self.WebService, "web")
		self.WebContainer.WebApp.middlewares.append(asab.web.rest.JsonExceptionMiddleware)

		# Api service
		from asab.api import ApiService
		self.ApiService = ApiService(self)
		self.ApiService.initialize_web(self.WebContainer)

		if "sentry" in asab.Config:
			from asab.sentry import SentryService
			self.SentryService = SentryService(self)

		from .authn import SessionTokenService
		self.SessionTokenService = SessionTokenService(self)

		from .middleware import auth_middleware_factory
		self.WebContainer.WebApp.middlewares.append(auth_middleware_factory(self))

		from .audit import AuditService
		self.AuditService = AuditService(self)

		from .challenge import ChallengeService
		self.ChallengeService = ChallengeService(self)

		from .registry import RegistryService, RegistryHandler
		self.RegistryService = RegistryService(self)
		self.RegistryHandler = RegistryHandler(self, self.RegistryService)

		from .avv import RiskService, RiskHandler
		self.RiskService = RiskService(self)
		self.RiskHandler = RiskHandler(self, self.RiskService)

		from .ceremony import CeremonyService, CeremonyHandler
		self.CeremonyService = CeremonyService(self)
		self.CeremonyHandler = CeremonyHandler(self, self.CeremonyService)

		from .passcode import PasscodeService, PasscodeHandler
		self.PasscodeService = PasscodeService(self)
		self.PasscodeHandler = PasscodeHandler(self, self.PasscodeService)
