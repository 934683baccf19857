"""Configuration loading and validation."""

import os
import re
from pathlib import Path

import dotenv
import yaml
from pydantic import BaseModel, field_validator

TOKEN_ENV_VAR = "SYMBOLUP_TOKEN"
REALM_ENV_VAR = "SYMBOLUP_REALM"

DEFAULT_CONFIG_PATH = Path("~/.config/symbolup/config.yaml")


class ServiceConfig(BaseModel):
    """Where and how to reach the symbol upload service."""

    realm: str = "us0"
    token: str | None = None
    api_url: str | None = None
    dsym_path: str = "/v2/rum-mfm/dsym"
    mapping_path: str = "/v2/rum-mfm/proguard"
    mock_upload: bool = False

    @field_validator("realm")
    @classmethod
    def validate_realm(cls, v: str) -> str:
        v = v.strip()
        if not re.fullmatch(r"[a-z0-9]+", v):
            raise ValueError(f"Invalid realm '{v}': expected lowercase letters and digits")
        return v

    @field_validator("token", mode="before")
    @classmethod
    def strip_token(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @property
    def base_url(self) -> str:
        url = self.api_url or f"https://api.{self.realm}.signalfx.com"
        return url.rstrip("/")

    def dsym_url(self) -> str:
        return f"{self.base_url}{self.dsym_path}"

    def mapping_list_url(self, app_id: str) -> str:
        return f"{self.base_url}{self.mapping_path}/{app_id}"

    def mapping_url(self, app_id: str, version_code: int, uuid: str | None = None) -> str:
        url = f"{self.base_url}{self.mapping_path}/{app_id}/{version_code}"
        if uuid:
            url = f"{url}/{uuid}"
        return url


def load_config(config_path: Path | None = None) -> ServiceConfig:
    """
    Load service configuration.

    Values come from the YAML file when it exists, then from the
    SYMBOLUP_TOKEN and SYMBOLUP_REALM environment variables (a local .env
    file is read too) for anything the file leaves unset.

    Args:
        config_path: YAML config path; defaults to ~/.config/symbolup/config.yaml

    Returns:
        Validated ServiceConfig
    """
    dotenv.load_dotenv()

    path = Path(os.path.expanduser(str(config_path or DEFAULT_CONFIG_PATH)))
    data: dict = {}
    if path.exists():
        with open(path) as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid config file {path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    elif config_path is not None:
        raise FileNotFoundError(f"Config file not found: {path}")

    if data.get("token") is None and os.environ.get(TOKEN_ENV_VAR):
        data["token"] = os.environ[TOKEN_ENV_VAR]
    if data.get("realm") is None and os.environ.get(REALM_ENV_VAR):
        data["realm"] = os.environ[REALM_ENV_VAR]

    return ServiceConfig(**data)
