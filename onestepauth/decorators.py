import functools
import inspect
import logging

import aiohttp.web
import asab

#

L = logging.getLogger(__name__)

#


def require_authentication(handler):
	"""
	Refuse the request with 401 unless it carries a valid session token.

	The authenticated owner is passed to the handler as the `owner_id` keyword argument,
	if the handler declares it.
	```
	@require_authentication
	async def delete_passcode(self, request, *, owner_id):
		...
	```
	"""
	pass_owner_id = "owner_id" in inspect.getfullargspec(handler).kwonlyargs

	@functools.wraps(handler)
	async def wrapper(*args, **kwargs):
		request = args[-1]
		owner_id = getattr(request, "OwnerId", None)
		if owner_id is None:
			L.log(asab.LOG_NOTICE, "Unauthorized access: Authentication required", struct_data={"path": request.path})
			return aiohttp.web.HTTPUnauthorized()

		if pass_owner_id:
			kwargs["owner_id"] = owner_id
		return await handler(*args, **kwargs)

	return wrapper
