from .two_factor_runtime_config import (
    load_two_factor_auth_config,
    resolve_two_factor_config_path,
)

__all__ = [
    "load_two_factor_auth_config",
    "resolve_two_factor_config_path",
]
