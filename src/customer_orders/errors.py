"""Error taxonomy shared by services and the HTTP layer."""


class CustomerOrdersError(Exception):
    """Base class for errors raised by the application."""


class ConfigurationError(CustomerOrdersError):
    """A required setting is missing or unusable."""


class InvalidRequest(CustomerOrdersError):
    """Client supplied malformed or missing input."""


class CustomerNotFound(CustomerOrdersError):
    """The referenced customer does not exist."""


class CustomerExists(CustomerOrdersError):
    """A customer with the same business code already exists."""


class OrderNotFound(CustomerOrdersError):
    """The requested order does not exist."""


class PersistenceError(CustomerOrdersError):
    """The persistence collaborator failed."""


class TokenError(CustomerOrdersError):
    """A signed token could not be verified."""


class MalformedToken(TokenError):
    """The token is not a structurally valid JWT."""


class SignatureMismatch(TokenError):
    """The token signature does not match its payload."""


class TokenExpired(TokenError):
    """The token is at or past its expiry time."""


class TokenNotYetValid(TokenError):
    """The token's not-before time is in the future."""


class InvalidTokenClaims(TokenError):
    """The token was signed by us but carries unexpected claims."""


class CredentialError(CustomerOrdersError):
    """The request carries no usable bearer credential."""


class MissingCredential(CredentialError):
    """No Authorization header was sent."""


class MalformedCredential(CredentialError):
    """The Authorization header is not of the form ``Bearer <token>``."""


class LoginError(CustomerOrdersError):
    """Delegated login failed."""


class ProviderNotConfigured(LoginError):
    """The identity provider login was requested but is not configured."""


class MissingAuthorizationCode(LoginError):
    """The provider callback arrived without an authorization code."""


class TokenExchangeFailed(LoginError):
    """The provider rejected or failed the code exchange."""


class IdentityAssertionInvalid(LoginError):
    """The provider's ID token failed verification."""
