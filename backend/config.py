import json
import os
import logging
from typing import Any, Dict, Mapping, Optional
from pydantic import BaseModel, field_validator

from validation import validate_port

logger = logging.getLogger("SvcWatch.Config")

CONFIG_PATH = os.getenv("SVCWATCH_CONFIG", os.path.join(os.path.dirname(__file__), "config.json"))

DEFAULT_RETRY = 0
DEFAULT_TIMEOUT = 3000  # milliseconds, applies to connect and to each read
DEFAULT_DSNAME = "response-time"


class ProbeParameters(BaseModel):
    """Resolved parameters for one probe. Immutable."""
    address: str
    port: int
    timeout: int = DEFAULT_TIMEOUT
    retry: int = DEFAULT_RETRY
    userid: Optional[str] = None
    password: Optional[str] = None
    rrd_repository: Optional[str] = None
    ds_name: str = DEFAULT_DSNAME

    class Config:
        frozen = True

    @field_validator('port')
    @classmethod
    def check_port(cls, v: int) -> int:
        if not validate_port(v):
            raise ValueError('Port must be between 1 and 65535')
        return v

    @field_validator('timeout')
    @classmethod
    def check_timeout(cls, v: int) -> int:
        if v <= 0:
            raise ValueError('Timeout must be a positive number of milliseconds')
        return v

    @field_validator('retry')
    @classmethod
    def check_retry(cls, v: int) -> int:
        if v < 0:
            raise ValueError('Retry count cannot be negative')
        return v

    @property
    def timeout_seconds(self) -> float:
        return self.timeout / 1000.0

    @classmethod
    def from_parameters(cls, address: str, parameters: Mapping[str, Any], default_port: int) -> "ProbeParameters":
        """
        Build parameters from a key/value map.

        Recognized keys: retry, port, timeout, userid, password,
        rrd-repository, ds-name. Missing keys take their defaults.
        """
        return cls(
            address=address,
            port=get_keyed_int(parameters, "port", default_port),
            timeout=get_keyed_int(parameters, "timeout", DEFAULT_TIMEOUT),
            retry=get_keyed_int(parameters, "retry", DEFAULT_RETRY),
            userid=get_keyed_str(parameters, "userid"),
            password=get_keyed_str(parameters, "password"),
            rrd_repository=get_keyed_str(parameters, "rrd-repository"),
            ds_name=get_keyed_str(parameters, "ds-name") or DEFAULT_DSNAME,
        )


def get_keyed_int(parameters: Mapping[str, Any], key: str, default: int) -> int:
    """Integer lookup that falls back to the default on missing or unparsable values"""
    value = parameters.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning(f"Invalid value {value!r} for parameter '{key}', defaulting to {default}")
        return default

def get_keyed_str(parameters: Mapping[str, Any], key: str, default: Optional[str] = None) -> Optional[str]:
    value = parameters.get(key)
    if value is None:
        return default
    return str(value)


def load_app_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Read config.json. A missing or corrupt file yields an empty config.
    """
    path = path or CONFIG_PATH
    if not os.path.exists(path):
        logger.info(f"No configuration file at {path}, using built-in defaults")
        return {}
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to read configuration {path}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Configuration {path} is not a JSON object, ignoring it")
        return {}
    return data

def monitor_defaults(app_config: Dict[str, Any], monitor_name: str) -> Dict[str, Any]:
    """Default parameters for one monitor from the "monitors" section"""
    defaults = app_config.get("monitors", {}).get(monitor_name, {})
    if not isinstance(defaults, dict):
        logger.warning(f"Ignoring non-object defaults for monitor '{monitor_name}'")
        return {}
    return dict(defaults)
