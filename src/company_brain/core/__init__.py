from .base import (
    ApplicationError,
    ErrorCode,
    ErrorLevel,
    ServiceErrorDetails,
)
from .errors import (
    ConfigurationError,
    PersistenceError,
    ProviderError,
    RankingUnavailableError,
    ValidationError,
)
