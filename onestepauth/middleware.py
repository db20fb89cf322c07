import logging

import aiohttp.web

from .generic import get_bearer_token_value

#

L = logging.getLogger(__name__)

#


def auth_middleware_factory(app):
	session_token_svc = app.get_service("onestepauth.SessionTokenService")

	@aiohttp.web.middleware
	async def auth_middleware(request, handler):
		"""
		Resolve the session token into the owner ID.
		Requests without a valid token continue with `request.OwnerId = None`;
		handlers that need an owner are protected by `require_authentication`.
		"""
		request.OwnerId = None
		token_value = get_bearer_token_value(request)
		if token_value is not None:
			request.OwnerId = session_token_svc.get_owner_id(token_value)
		return await handler(request)

	return auth_middleware
