"""Error taxonomy for the query pipeline."""


class TableStakesError(Exception):
    """Base exception for Table Stakes."""
    pass


class ConfigurationError(TableStakesError):
    """Raised when a data source or provider is missing or unsupported."""
    pass


class DatabaseConnectionError(TableStakesError):
    """Raised when a database session cannot be acquired."""
    pass


class SchemaError(TableStakesError):
    """Raised when schema introspection fails."""
    pass


class QueryExecutionError(TableStakesError):
    """Raised when SQL execution fails."""
    pass


class GenerationError(TableStakesError):
    """Raised when the completion service is unreachable or errors."""
    pass


class VisualizationError(TableStakesError):
    """Raised when a chart specification is malformed. Never leaves the synthesizer."""
    pass
