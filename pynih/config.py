"""
Configuration file for PyNIH

This module contains all configuration constants and magic numbers
used throughout the PyNIH package.
"""


class APIConfig:
    """API-related configuration constants"""
    
    # Project search endpoint
    SEARCH_URL = "https://api.reporter.nih.gov/v2/projects/search"
    
    # Request timeouts
    DEFAULT_TIMEOUT = 60  # seconds
    
    # Environment variable that turns on request echoing
    DEBUG_ENV_VAR = "PYNIH_DEBUG"


class QueryConfig:
    """Query bounds accepted by the project search endpoint"""
    
    DEFAULT_LIMIT = 50
    MAX_LIMIT = 14999  # API limit
    MIN_OFFSET = 0
    DEFAULT_SORT_ORDER = "asc"


class RetryConfig:
    """Retry policy for transient upstream failures"""
    
    # Total attempts, including the first one
    MAX_ATTEMPTS = 3
    
    # Exponential backoff seed and cap
    BASE_DELAY = 2.0  # seconds
    MAX_DELAY = 32.0  # seconds
    
    # Statuses in [500, 600) plus these are retried
    EXTRA_RETRYABLE_STATUSES = (429,)


class CLIConfig:
    """CLI-related configuration constants"""
    
    # Default page size for CLI commands
    DEFAULT_LIMIT = 20


class DisplayConfig:
    """Display and formatting configuration"""
    
    # Table truncation limits
    MAX_TITLE_LENGTH = 60
    
    # JSON output formatting
    JSON_INDENT = 2
    
    # Console colors (Rich formatting)
    SUCCESS_COLOR = "green"
    ERROR_COLOR = "red" 
    WARNING_COLOR = "yellow"
    INFO_COLOR = "blue"
