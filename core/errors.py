"""
Error taxonomy
==============

GatewayError subclasses are "known" failures: the error mapper shows their
message to the caller. Anything else is reported as a generic server error.

AccessRejected subclasses carry their own HTTP status and are answered by the
access control middleware directly.
"""


class GatewayError(Exception):
    """Base class for all signer errors"""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigError(GatewayError):
    """Keychain could not be read, parsed or validated (deployment fault)"""


class ValidationError(GatewayError):
    """Request parameter is malformed (e.g. unknown platform)"""


class PlatformSigningError(GatewayError):
    """Address derivation or transaction signing failed"""


class AccessRejected(GatewayError):
    """Request rejected by access control"""


class KeyNotFound(AccessRejected):
    status_code = 404

    def __init__(self):
        super().__init__("Key not found")


class NoSignature(AccessRejected):
    status_code = 401

    def __init__(self):
        super().__init__("No signature")


class RestrictedIP(AccessRejected):
    status_code = 403

    def __init__(self):
        super().__init__("Restricted IP")


class WrongSignature(AccessRejected):
    status_code = 403

    def __init__(self):
        super().__init__("Wrong signature")
