"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class StorageAPIError(DomainException):
    """Storage collaborator returned an error or is unavailable"""

    pass


class InvalidTransactionDataError(DomainException):
    """Collaborator payload has an unusable shape"""

    pass


class InvalidSimulationParametersError(DomainException):
    """Projection or goal parameters are out of range"""

    pass
