"""Portal exceptions.

Services raise these; the blueprints decide whether a failure becomes a
redirect, a flash message or a plain-text 404.
"""


class PortalError(Exception):
    """Base class for every error raised by the portal services."""

    default_message = "Portal error"

    def __init__(self, message=None, code=None):
        self.message = message or self.default_message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


class AuthError(PortalError):
    default_message = "Authentication failed"


class MissingIdentityError(AuthError):
    default_message = "No email or UPN found in the authentication response"


class DomainNotAllowedError(AuthError):
    default_message = "Invalid email domain"

    def __init__(self, email, message=None):
        self.email = email
        super().__init__(message or f"Invalid email domain: {email}")


class OIDCError(AuthError):
    """Identity provider handshake failed (state, token exchange, token validation)."""

    default_message = "OpenID Connect handshake failed"


class DirectoryError(PortalError):
    default_message = "User directory unavailable"


class StorageError(PortalError):
    default_message = "Could not write the uploaded file"


class NoFileProvidedError(PortalError):
    default_message = "No file uploaded."


class UnsupportedFileTypeError(PortalError):
    default_message = "Error: File type not supported!"

    def __init__(self, filename=None, mimetype=None):
        self.filename = filename
        self.mimetype = mimetype
        super().__init__()


class NotFoundError(PortalError):
    default_message = "Not found."
