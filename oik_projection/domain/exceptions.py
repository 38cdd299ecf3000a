"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class AuthenticationError(DomainException):
    """Bearer token is missing, malformed or rejected by the identity provider"""

    pass


class FamilyResolutionError(DomainException):
    """Authenticated user has no active family membership"""

    pass


class AdvisoryGenerationError(DomainException):
    """Advisory generator failed or returned content that is not a narrative"""

    pass


class ComputationFault(DomainException):
    """Unexpected failure while aggregating or projecting"""

    pass
