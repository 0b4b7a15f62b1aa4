from .loader import get_config, get_config_path, apply_env_overrides
from .models import ApiSettings, admin_ids, admin_roles
from .validator import validate_config, ConfigValidationError

__all__ = [
    "get_config",
    "get_config_path",
    "apply_env_overrides",
    "ApiSettings",
    "admin_ids",
    "admin_roles",
    "validate_config",
    "ConfigValidationError",
]
