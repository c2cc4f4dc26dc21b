"""Process-wide configuration for markdown-provenance.

Settings are resolved once at start-up and passed explicitly into the
services that need them.  Three layers are merged, later layers winning:

1. Built-in defaults (Arweave mainnet endpoints, 300 s ArNS TTL).
2. An optional ``config.yaml`` in the data directory.
3. ``MP_*`` environment variables.

CLI flags (``--author``) are applied on top by the caller.

Environment variables
---------------------
MP_WALLET_PATH        Path to the Arweave JWK wallet file.
MP_AUTHOR             Default ``Author`` tag value.
MP_ARNS_NAME          Registered ArNS name updated by ``brain-sync``.
MP_ARNS_TTL           ArNS record TTL in seconds (positive integer).
MP_HOME               Data directory (default ``~/.markdown-provenance``).
MP_CACHE_REMOTE_HITS  Whether remote dedup hits are cached locally.
"""
from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, PositiveInt, ValidationError, field_validator

from markdown_provenance.errors import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.yaml"
TRANSACTIONS_FILE_NAME = "transactions.jsonl"
BRAIN_VERSIONS_FILE_NAME = "brain-versions.jsonl"
BRAIN_INSTRUCTIONS_FILE_NAME = "brain-instructions.md"

DEFAULT_ARNS_TTL_SECONDS = 300
DEFAULT_SUBMIT_TIMEOUT_SECONDS = 60.0
#: AR.IO network registry process on AO mainnet.
DEFAULT_ARIO_PROCESS_ID = "qNvAoz0TgcH7DMg8BCVn8jF32QH5L6T29VjHxhHqqGE"

#: Environment variable -> config field.
ENV_VARS: dict[str, str] = {
    "MP_WALLET_PATH": "wallet_path",
    "MP_AUTHOR": "author",
    "MP_ARNS_NAME": "arns_name",
    "MP_ARNS_TTL": "arns_ttl_seconds",
    "MP_HOME": "data_dir",
    "MP_CACHE_REMOTE_HITS": "cache_remote_hits",
}

_WALLET_HELP = (
    "MP_WALLET_PATH environment variable not set.\n\n"
    "To set up your Arweave wallet:\n"
    "1. Generate a wallet: npx -y arweave wallet generate > wallet.json\n"
    "2. Set the environment variable:\n"
    '   export MP_WALLET_PATH="/path/to/wallet.json"\n'
    "3. Add to ~/.zshrc or ~/.bashrc for persistence"
)

_ARNS_HELP = (
    "MP_ARNS_NAME environment variable not set.\n\n"
    "Set it to your registered ArNS name:\n"
    '  export MP_ARNS_NAME="yourname"\n\n'
    "Register a name at https://arns.ar.io if you haven't already.\n"
    "Your wallet (MP_WALLET_PATH) must be an owner or controller of the "
    "ArNS name's ANT process."
)


def default_data_dir() -> Path:
    return Path.home() / ".markdown-provenance"


class ProvenanceConfig(BaseModel):
    """Validated configuration for a single process.

    Attributes
    ----------
    wallet_path:
        Location of the Arweave JWK wallet.  Required before any upload.
    author:
        Default value for the ``Author`` tag.
    arns_name:
        Registered ArNS name whose root record points at the brain document.
    arns_ttl_seconds:
        TTL attached to the ArNS record update.
    data_dir:
        Directory holding the transaction log and brain files.
    cache_remote_hits:
        When True, a dedup hit found only on Arweave is appended to the
        local log so later lookups resolve without a network query.
    gateway_url:
        Arweave gateway used for direct links.
    graphql_url:
        GraphQL endpoint used for remote dedup queries.
    upload_url:
        Turbo upload service base URL.
    viewblock_url:
        Explorer base URL for human-facing transaction links.
    cu_url:
        AO compute unit used to read the ArNS registry.
    mu_url:
        AO messenger unit used to send the ANT record update.
    ario_process_id:
        AO process id of the AR.IO registry.
    submit_timeout_seconds:
        Timeout applied to each upload and pointer request.
    """

    wallet_path: Path | None = None
    author: str | None = None
    arns_name: str | None = None
    arns_ttl_seconds: PositiveInt = DEFAULT_ARNS_TTL_SECONDS
    data_dir: Path = Field(default_factory=default_data_dir)
    cache_remote_hits: bool = True
    gateway_url: str = "https://arweave.net"
    graphql_url: str = "https://arweave.net/graphql"
    upload_url: str = "https://upload.ardrive.io"
    viewblock_url: str = "https://viewblock.io/arweave/tx"
    cu_url: str = "https://cu.ardrive.io"
    mu_url: str = "https://mu.ao-testnet.xyz"
    ario_process_id: str = DEFAULT_ARIO_PROCESS_ID
    submit_timeout_seconds: float = Field(default=DEFAULT_SUBMIT_TIMEOUT_SECONDS, gt=0)

    model_config = {"frozen": True}

    @field_validator("wallet_path", "data_dir", mode="after")
    @classmethod
    def _expand_user(cls, value: Path | None) -> Path | None:
        return value.expanduser() if value is not None else None

    @field_validator("author", "arns_name", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator(
        "gateway_url", "graphql_url", "upload_url", "viewblock_url", "cu_url", "mu_url"
    )
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def load(
        cls,
        environ: Mapping[str, str] | None = None,
        config_file: Path | None = None,
    ) -> "ProvenanceConfig":
        """Build a config from defaults, an optional YAML file and the environment.

        Parameters
        ----------
        environ:
            Environment mapping; defaults to ``os.environ``.
        config_file:
            Explicit YAML file.  When omitted, ``config.yaml`` inside the
            resolved data directory is used if it exists.

        Returns
        -------
        ProvenanceConfig
            The validated configuration.

        Raises
        ------
        ConfigurationError
            If the YAML file is malformed or any value fails validation.
        """
        env = os.environ if environ is None else environ
        overrides: dict[str, object] = {
            field_name: env[var] for var, field_name in ENV_VARS.items() if env.get(var)
        }

        if config_file is None:
            data_dir = Path(str(overrides.get("data_dir", default_data_dir()))).expanduser()
            candidate = data_dir / CONFIG_FILE_NAME
            config_file = candidate if candidate.is_file() else None

        values: dict[str, object] = {}
        if config_file is not None:
            values.update(_read_yaml(config_file))
        values.update(overrides)

        try:
            return cls.model_validate(values)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid configuration: {exc}") from exc

    def with_overrides(self, **changes: object) -> "ProvenanceConfig":
        """Return a copy with non-None *changes* applied and re-validated."""
        applied = {key: value for key, value in changes.items() if value is not None}
        if not applied:
            return self
        try:
            return type(self).model_validate({**self.model_dump(), **applied})
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid configuration: {exc}") from exc

    # ------------------------------------------------------------------
    # Required values
    # ------------------------------------------------------------------

    def require_wallet_path(self) -> Path:
        """Return the wallet path or raise :class:`ConfigurationError`."""
        if self.wallet_path is None:
            raise ConfigurationError(_WALLET_HELP)
        return self.wallet_path

    def require_arns_name(self) -> str:
        """Return the ArNS name or raise :class:`ConfigurationError`."""
        if self.arns_name is None:
            raise ConfigurationError(_ARNS_HELP)
        return self.arns_name

    # ------------------------------------------------------------------
    # Derived paths
    # ------------------------------------------------------------------

    @property
    def transactions_file(self) -> Path:
        return self.data_dir / TRANSACTIONS_FILE_NAME

    @property
    def brain_versions_file(self) -> Path:
        return self.data_dir / BRAIN_VERSIONS_FILE_NAME

    @property
    def brain_instructions_file(self) -> Path:
        return self.data_dir / BRAIN_INSTRUCTIONS_FILE_NAME


def _read_yaml(path: Path) -> dict[str, object]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(f"Cannot read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Malformed config file {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping at top level.")
    logger.debug("Loaded %d setting(s) from %s", len(data), path)
    return data


__all__ = [
    "DEFAULT_ARNS_TTL_SECONDS",
    "DEFAULT_SUBMIT_TIMEOUT_SECONDS",
    "ENV_VARS",
    "ProvenanceConfig",
]
