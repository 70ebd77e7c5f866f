"""Azure AD OpenID Connect adapter (authorization code flow, form_post).

Only the provider handshake lives here. Turning the decoded claims into a
portal user is done by ``identity.verify_identity`` and the directory.
"""
import logging
from urllib.parse import urlencode

import jwt
import requests
from flask import current_app

from ..exceptions import OIDCError

logger = logging.getLogger(__name__)

# tenants whose discovery document carries a "{tenantid}" issuer template
MULTI_TENANT = ("common", "organizations", "consumers")


class AzureADClient:
    def __init__(self, tenant_id, client_id, client_secret, redirect_uri,
                 scopes="openid profile email", authority="https://login.microsoftonline.com",
                 timeout=10):
        self.tenant_id = tenant_id
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.scopes = scopes
        self.authority = authority.rstrip("/")
        self.timeout = timeout
        self._metadata = None
        self._jwks_client = None

    @classmethod
    def from_config(cls, config):
        return cls(
            tenant_id=config["TENANT_ID"],
            client_id=config["CLIENT_ID"],
            client_secret=config["CLIENT_SECRET"],
            redirect_uri=config["REDIRECT_URI"],
            scopes=config.get("OIDC_SCOPES", "openid profile email"),
            authority=config.get("OIDC_AUTHORITY", "https://login.microsoftonline.com"),
            timeout=config.get("OIDC_TIMEOUT", 10),
        )

    @property
    def metadata_url(self):
        return f"{self.authority}/{self.tenant_id}/.well-known/openid-configuration"

    def metadata(self):
        if self._metadata is None:
            try:
                res = requests.get(self.metadata_url, timeout=self.timeout)
            except requests.RequestException as e:
                raise OIDCError(f"Could not reach identity metadata: {e}") from e
            if res.status_code != 200:
                raise OIDCError(f"Identity metadata returned HTTP {res.status_code}")
            self._metadata = res.json()
        return self._metadata

    def authorization_url(self, state, nonce):
        params = {
            "client_id": self.client_id,
            "response_type": "code",
            "response_mode": "form_post",
            "redirect_uri": self.redirect_uri,
            "scope": self.scopes,
            "state": state,
            "nonce": nonce,
        }
        return self.metadata()["authorization_endpoint"] + "?" + urlencode(params)

    def exchange_code(self, code):
        try:
            res = requests.post(
                self.metadata()["token_endpoint"],
                data={
                    "grant_type": "authorization_code",
                    "code": code,
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "redirect_uri": self.redirect_uri,
                    "scope": self.scopes,
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise OIDCError(f"Token endpoint unreachable: {e}") from e
        if res.status_code != 200:
            logger.warning("Token exchange failed: HTTP %s %s", res.status_code, res.text[:500])
            raise OIDCError("token_exchange_failed")
        tokens = res.json()
        if not tokens.get("id_token"):
            raise OIDCError("Token response carried no id_token")
        return tokens

    def _signing_key(self, id_token):
        if self._jwks_client is None:
            self._jwks_client = jwt.PyJWKClient(self.metadata()["jwks_uri"])
        return self._jwks_client.get_signing_key_from_jwt(id_token).key

    def decode_id_token(self, id_token, nonce=None):
        issuer = None
        if self.tenant_id not in MULTI_TENANT:
            issuer = self.metadata().get("issuer")
        try:
            claims = jwt.decode(
                id_token,
                self._signing_key(id_token),
                algorithms=["RS256"],
                audience=self.client_id,
                issuer=issuer,
                options={"verify_iss": issuer is not None},
            )
        except jwt.PyJWTError as e:
            raise OIDCError(f"invalid_id_token: {e}") from e
        if nonce is not None and claims.get("nonce") != nonce:
            raise OIDCError("ID token nonce mismatch")
        return claims


def get_oidc_client():
    """The app-wide provider client, built from config on first use."""
    client = current_app.extensions.get('oidc_client')
    if client is None:
        client = AzureADClient.from_config(current_app.config)
        current_app.extensions['oidc_client'] = client
    return client
