import json
import logging
import typing

import asab
import jwcrypto.common
import jwcrypto.jwk
import jwcrypto.jwt

#

L = logging.getLogger(__name__)

#


asab.Config.add_defaults({
	"onestepauth:session": {
		# PEM file with the public key of the session issuer.
		# Without it, no session token is accepted and owner-scoped endpoints respond with 401.
		"public_key": "",

		# Expected "iss" claim, not checked if empty
		"issuer": "",
	}
})


class SessionTokenService(asab.Service):
	"""
	Verifies session tokens issued by the external session issuer.

	The token is a signed JWT with the owner ID in the "sub" claim and a mandatory "exp" claim.
	"""

	def __init__(self, app, service_name="onestepauth.SessionTokenService", public_key: jwcrypto.jwk.JWK = None):
		super().__init__(app, service_name)
		self.Issuer = asab.Config.get("onestepauth:session", "issuer")
		if public_key is None:
			public_key = self._load_public_key()
		self.PublicKey = public_key


	def _load_public_key(self) -> typing.Optional[jwcrypto.jwk.JWK]:
		public_key_path = asab.Config.get("onestepauth:session", "public_key")
		if len(public_key_path) == 0:
			L.warning("Session issuer public key not configured. Owner-scoped endpoints will refuse all requests.")
			return None
		with open(public_key_path, "rb") as f:
			return jwcrypto.jwk.JWK.from_pem(f.read())


	def get_owner_id(self, token_value: str) -> typing.Optional[str]:
		"""
		Return the owner ID of a valid session token, or None
		"""
		if self.PublicKey is None:
			return None

		check_claims = {"sub": None, "exp": None}
		if len(self.Issuer) > 0:
			check_claims["iss"] = self.Issuer

		try:
			token = jwcrypto.jwt.JWT(jwt=token_value, key=self.PublicKey, check_claims=check_claims)
		except jwcrypto.jwt.JWTExpired:
			L.log(asab.LOG_NOTICE, "Session token expired")
			return None
		except (jwcrypto.common.JWException, ValueError) as e:
			L.warning("Invalid session token ({})".format(e.__class__.__name__))
			return None

		owner_id = json.loads(token.claims).get("sub")
		if not isinstance(owner_id, str) or len(owner_id) == 0:
			L.warning("Session token has no valid subject")
			return None
		return owner_id
