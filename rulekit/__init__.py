# Package exports
from rulekit.config import settings, get_settings
from rulekit.logging import configure_logging, get_logger
from rulekit.validation import (
    FieldExtractor,
    ValidationError,
    ConfigurationError,
    Validator,
    rule,
)

__version__ = "0.1.0"
