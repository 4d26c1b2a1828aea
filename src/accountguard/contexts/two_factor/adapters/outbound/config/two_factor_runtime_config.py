from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import yaml

from accountguard.contexts.two_factor.application.dto import TwoFactorAuthConfig

_ENV_NAME_KEY = "ACCOUNTGUARD_ENV"
_TWO_FACTOR_CONFIG_PATH_KEY = "ACCOUNTGUARD_TWO_FACTOR_CONFIG"
_ALLOWED_ENVS = ("dev", "prod", "test")
_SUPPORTED_VERSION = 1
_DEFAULTS = TwoFactorAuthConfig()


def resolve_two_factor_config_path(*, environ: Mapping[str, str]) -> Path:
    """
    Resolve two-factor runtime config path using env override and fallback layout.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - configs/dev/two_factor.yaml
      - configs/test/two_factor.yaml

    Args:
        environ: Runtime environment mapping.
    Returns:
        Path: Resolved path to runtime config.
    Assumptions:
        Precedence is `ACCOUNTGUARD_TWO_FACTOR_CONFIG` > `configs/<env>/two_factor.yaml`.
    Raises:
        ValueError: If `ACCOUNTGUARD_ENV` value is invalid.
    Side Effects:
        None.
    """
    override_path = environ.get(_TWO_FACTOR_CONFIG_PATH_KEY, "").strip()
    if override_path:
        return Path(override_path)

    env_name = _resolve_env_name(environ=environ)
    return Path("configs") / env_name / "two_factor.yaml"


def load_two_factor_auth_config(path: str | Path) -> TwoFactorAuthConfig:
    """
    Load and validate two-factor runtime YAML config.

    Docs:
      - docs/architecture/two_factor/two-factor-auth-core-v1.md
    Related:
      - src/accountguard/contexts/two_factor/application/dto/two_factor_auth_config.py
      - configs/dev/two_factor.yaml

    Args:
        path: Path to `two_factor.yaml`.
    Returns:
        TwoFactorAuthConfig: Parsed and validated runtime config.
    Assumptions:
        YAML payload contains top-level `two_factor` mapping with `version`; absent scalar
        keys fall back to `TwoFactorAuthConfig` defaults.
    Raises:
        FileNotFoundError: If config path does not exist.
        ValueError: If YAML structure or values are invalid.
    Side Effects:
        Reads one UTF-8 YAML file from filesystem.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"two_factor config not found: {config_path}")

    payload = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if not isinstance(payload, Mapping):
        raise ValueError("two_factor config must be mapping at top-level")

    root = _get_mapping(payload, "two_factor", required=True)
    version = _get_int(root, "version", required=True)
    if version != _SUPPORTED_VERSION:
        raise ValueError(f"two_factor.version must be {_SUPPORTED_VERSION}, got {version}")

    totp_map = _get_mapping(root, "totp", required=False)
    credentials_map = _get_mapping(root, "credentials", required=False)
    email_map = _get_mapping(root, "email", required=False)
    app_passwords_map = _get_mapping(root, "app_passwords", required=False)
    trusted_devices_map = _get_mapping(root, "trusted_devices", required=False)

    return TwoFactorAuthConfig(
        totp_hash_algorithm=_get_str_with_default(
            totp_map,
            "hash_algorithm",
            default=_DEFAULTS.totp_hash_algorithm.value,
        ),  # type: ignore[arg-type]
        totp_code_length=_get_int_with_default(
            totp_map,
            "code_length",
            default=_DEFAULTS.totp_code_length,
        ),
        totp_time_window_ms=_get_int_with_default(
            totp_map,
            "time_window_ms",
            default=_DEFAULTS.totp_time_window_ms,
        ),
        totp_time_window_offset=_get_int_with_default(
            totp_map,
            "time_window_offset",
            default=_DEFAULTS.totp_time_window_offset,
        ),
        totp_issuer=_get_str_with_default(totp_map, "issuer", default=_DEFAULTS.totp_issuer),
        secret_length_bytes=_get_int_with_default(
            credentials_map,
            "secret_length_bytes",
            default=_DEFAULTS.secret_length_bytes,
        ),
        secret_encoding=_get_str_with_default(
            credentials_map,
            "secret_encoding",
            default=_DEFAULTS.secret_encoding.value,
        ),  # type: ignore[arg-type]
        scratch_code_length_bytes=_get_int_with_default(
            credentials_map,
            "scratch_code_length_bytes",
            default=_DEFAULTS.scratch_code_length_bytes,
        ),
        scratch_code_encoding=_get_str_with_default(
            credentials_map,
            "scratch_code_encoding",
            default=_DEFAULTS.scratch_code_encoding.value,
        ),  # type: ignore[arg-type]
        num_scratch_codes=_get_int_with_default(
            credentials_map,
            "num_scratch_codes",
            default=_DEFAULTS.num_scratch_codes,
        ),
        email_code_length=_get_int_with_default(
            email_map,
            "code_length",
            default=_DEFAULTS.email_code_length,
        ),
        email_code_lifetime_ms=_get_int_with_default(
            email_map,
            "code_lifetime_ms",
            default=_DEFAULTS.email_code_lifetime_ms,
        ),
        max_app_specific_passwords=_get_int_with_default(
            app_passwords_map,
            "max_count",
            default=_DEFAULTS.max_app_specific_passwords,
        ),
        app_password_length=_get_int_with_default(
            app_passwords_map,
            "length",
            default=_DEFAULTS.app_password_length,
        ),
        app_password_lifetime_ms=_get_int_with_default(
            app_passwords_map,
            "lifetime_ms",
            default=_DEFAULTS.app_password_lifetime_ms,
        ),
        revoke_app_passwords_on_password_change=_get_bool_with_default(
            app_passwords_map,
            "revoke_on_password_change",
            default=_DEFAULTS.revoke_app_passwords_on_password_change,
        ),
        trusted_device_ttl_ms=_get_int_with_default(
            trusted_devices_map,
            "ttl_ms",
            default=_DEFAULTS.trusted_device_ttl_ms,
        ),
        trusted_device_cookie_name=_get_str_with_default(
            trusted_devices_map,
            "cookie_name",
            default=_DEFAULTS.trusted_device_cookie_name,
        ),
    )


def _resolve_env_name(*, environ: Mapping[str, str]) -> str:
    """
    Resolve normalized runtime environment name for config fallback path.

    Args:
        environ: Runtime environment mapping.
    Returns:
        str: One of `dev`, `prod`, or `test`.
    Assumptions:
        Missing `ACCOUNTGUARD_ENV` defaults to `dev`.
    Raises:
        ValueError: If value is outside allowed environment literals.
    Side Effects:
        None.
    """
    raw_env_name = environ.get(_ENV_NAME_KEY, "dev").strip().lower()
    if raw_env_name not in _ALLOWED_ENVS:
        raise ValueError(
            f"{_ENV_NAME_KEY} must be one of {_ALLOWED_ENVS}, got {raw_env_name!r}"
        )
    return raw_env_name


def _get_mapping(data: Mapping[str, Any], key: str, *, required: bool) -> Mapping[str, Any]:
    value = data.get(key)
    if value is None:
        if required:
            raise ValueError(f"missing required key: {key}")
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"expected mapping at key '{key}', got {type(value).__name__}")
    return value


def _get_int(data: Mapping[str, Any], key: str, *, required: bool) -> int:
    """
    Read integer config value with bool rejection.

    Args:
        data: Source mapping.
        key: Integer key name.
        required: Whether key is required.
    Returns:
        int: Parsed integer value.
    Assumptions:
        Boolean values are rejected even though bool is an int subclass.
    Raises:
        ValueError: If required key missing or value type is invalid.
    Side Effects:
        None.
    """
    value = data.get(key)
    if value is None:
        if required:
            raise ValueError(f"missing required key: {key}")
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"expected int at key '{key}', got {type(value).__name__}")
    return value


def _get_int_with_default(data: Mapping[str, Any], key: str, *, default: int) -> int:
    if key not in data:
        return default
    return _get_int(data, key, required=True)


def _get_str_with_default(data: Mapping[str, Any], key: str, *, default: str) -> str:
    if key not in data:
        return default
    value = data[key]
    if not isinstance(value, str):
        raise ValueError(f"expected string at key '{key}', got {type(value).__name__}")
    normalized = value.strip()
    if not normalized:
        raise ValueError(f"key '{key}' must be non-empty")
    return normalized


def _get_bool_with_default(data: Mapping[str, Any], key: str, *, default: bool) -> bool:
    if key not in data:
        return default
    value = data[key]
    if not isinstance(value, bool):
        raise ValueError(f"expected bool at key '{key}', got {type(value).__name__}")
    return value
