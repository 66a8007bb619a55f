"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class PassportRunNotFoundError(DomainException):
    """No passport run with this id (for this user)"""

    pass


class GenerationNotPaidError(DomainException):
    """Passport generation attempted before the run was paid for"""

    pass


class ActionPaymentRequiredError(DomainException):
    """Share or PDF requested without its own payment, or before generation was paid"""

    pass


class NarrativeProviderError(DomainException):
    """Narrative provider is unavailable or returned unusable output"""

    pass
