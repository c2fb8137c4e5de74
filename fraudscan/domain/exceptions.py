"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InputError(DomainException):
    """Uploaded file could not be turned into usable rows"""

    pass


class NoDataError(InputError):
    """CSV produced zero usable rows"""

    pass


class CSVParseError(InputError):
    """CSV content could not be parsed at all"""

    pass


class FeatureComputationError(DomainException):
    """Unexpected failure while computing transaction features"""

    pass


class ConfigurationError(DomainException):
    """Required credential or endpoint is not configured"""

    pass


class ExternalServiceError(DomainException):
    """External service call failed"""

    pass


class ScorerAPIError(ExternalServiceError):
    """Fraud scorer API returned an error or is unavailable"""

    pass


class PersistenceError(ExternalServiceError):
    """Datastore rejected the submission or is unavailable"""

    pass


class StageBusyError(DomainException):
    """Stage is already running for this analysis session"""

    pass


class SessionNotFoundError(DomainException):
    """No analysis session with the given id"""

    pass
