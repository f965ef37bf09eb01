# Core module exports
from typed_support.core.config import Settings, get_settings
from typed_support.core.logging import (
    configure_logging,
    get_logger,
    attributes_logger,
    forms_logger,
    schemas_logger,
)
