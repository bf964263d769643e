from coin_collect.auth.identity import CredentialState, IdentityCredential, IdentityProvider
from coin_collect.auth.service import AuthenticationService

__all__ = ["AuthenticationService", "CredentialState", "IdentityCredential", "IdentityProvider"]
