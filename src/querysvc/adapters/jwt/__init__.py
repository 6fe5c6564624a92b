"""JWT bearer token authenticator."""

from querysvc.adapters.jwt.adapter import JwtAuthenticator

__all__ = ["JwtAuthenticator"]
