"""Configuration model — immutable data containers describing accounts and filesystem options."""

from __future__ import annotations

import dataclasses

MEGABYTE = 1024 * 1024

LARGE_COPY_MODES = ("stage_blocks", "async_copy")

# Largest source a synchronous copy-by-URL accepts.
MAX_SYNC_COPY_MB = 256


@dataclasses.dataclass(frozen=True)
class FileSystemOptions:
    """Tuning options passed to every filesystem a manager creates.

    :param default_block_size_mb: Block size for chunked uploads until an
        object needs more than the store's block count allows.
    :param server_side_copy_threshold_mb: Same-account copies larger than
        this are done block by block instead of as a single copy-by-URL.
        At most :data:`MAX_SYNC_COPY_MB`.
    :param signed_url_validity_seconds: Lifetime of signed read URLs.
    :param signed_url_start_skew_seconds: How far signed URLs are backdated
        to tolerate clock skew between client and store.
    :param signed_url_https_only: Restrict signed URLs to HTTPS.
    :param listing_page_size: Page size requested from hierarchical listings.
    :param read_buffer_size_mb: Buffer size of input streams and stream copies.
    :param large_copy_mode: ``"stage_blocks"`` or ``"async_copy"``.
    :param copy_poll_interval_seconds: Poll interval for asynchronous copies.
    :param copy_timeout_seconds: Give up waiting on an asynchronous copy
        after this many seconds; ``None`` waits forever.
    """

    default_block_size_mb: int = 8
    server_side_copy_threshold_mb: int = 256
    signed_url_validity_seconds: int = 24 * 60 * 60
    signed_url_start_skew_seconds: int = 10 * 60
    signed_url_https_only: bool = True
    listing_page_size: int = 5000
    read_buffer_size_mb: int = 4
    large_copy_mode: str = "stage_blocks"
    copy_poll_interval_seconds: float = 1.0
    copy_timeout_seconds: float | None = None

    def __post_init__(self) -> None:
        positive = ("default_block_size_mb", "signed_url_validity_seconds", "listing_page_size", "read_buffer_size_mb")
        for field in positive:
            if getattr(self, field) <= 0:
                raise ValueError(f"{field} must be positive, got {getattr(self, field)!r}")
        threshold = self.server_side_copy_threshold_mb
        if not 0 <= threshold <= MAX_SYNC_COPY_MB:
            raise ValueError(
                f"server_side_copy_threshold_mb must be between 0 and {MAX_SYNC_COPY_MB}, got {threshold!r}"
            )
        if self.large_copy_mode not in LARGE_COPY_MODES:
            raise ValueError(f"large_copy_mode must be one of {LARGE_COPY_MODES}, got {self.large_copy_mode!r}")

    @property
    def default_block_size(self) -> int:
        """Default block size in bytes."""
        return self.default_block_size_mb * MEGABYTE

    @property
    def server_side_copy_threshold(self) -> int:
        """Block-staging threshold in bytes."""
        return self.server_side_copy_threshold_mb * MEGABYTE

    @property
    def read_buffer_size(self) -> int:
        """Read buffer size in bytes."""
        return self.read_buffer_size_mb * MEGABYTE

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> FileSystemOptions:
        """Construct from a plain dict, rejecting unknown keys.

        :raises ValueError: If ``data`` contains an unrecognized option.
        """
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown filesystem options: {unknown}. Recognized options: {sorted(known)}")
        return cls(**data)  # type: ignore[arg-type]


@dataclasses.dataclass(frozen=True)
class AccountConfig:
    """Describes how to connect to one storage account.

    At most one of ``connection_string``, ``account_key`` and ``sas_token``
    may be set. With none of them the account is reached with
    ``DefaultAzureCredential``.

    :param connection_string: Full storage connection string.
    :param account_key: Shared key of the account.
    :param sas_token: Account or container SAS token.
    :param account_url: Blob endpoint override (e.g. an emulator URL).
    :param endpoint_suffix: DNS suffix of the blob endpoint.
    """

    connection_string: str | None = None
    account_key: str | None = None
    sas_token: str | None = None
    account_url: str | None = None
    endpoint_suffix: str = "blob.core.windows.net"

    def __post_init__(self) -> None:
        given = [n for n in ("connection_string", "account_key", "sas_token") if getattr(self, n)]
        if len(given) > 1:
            raise ValueError(f"Only one credential may be configured per account, got {given}")


@dataclasses.dataclass(frozen=True)
class ProviderConfig:
    """Top-level configuration container.

    :param accounts: Mapping of storage account names to their configs.
    :param options: Options shared by every filesystem.
    :param scheme: URI scheme handled by the provider.
    """

    accounts: dict[str, AccountConfig] = dataclasses.field(default_factory=dict)
    options: FileSystemOptions = dataclasses.field(default_factory=FileSystemOptions)
    scheme: str = "azbs"

    def validate(self) -> None:
        """Validate account names and scheme.

        :raises ValueError: If an account name or the scheme is unusable.
        """
        if not self.scheme or not self.scheme.isalnum():
            raise ValueError(f"Scheme must be a non-empty alphanumeric string, got {self.scheme!r}")
        for name in self.accounts:
            if not name or "." in name or "/" in name:
                raise ValueError(f"Invalid storage account name {name!r}")

    def account(self, name: str) -> AccountConfig:
        """Return the config for ``name``, or a credential-less default."""
        return self.accounts.get(name, AccountConfig())

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> ProviderConfig:
        """Construct from a plain dict (e.g. parsed TOML/JSON).

        :param data: Dict with optional ``accounts``, ``options`` and ``scheme`` keys.
        """
        raw_accounts = data.get("accounts", {})
        raw_options = data.get("options", {})
        if not isinstance(raw_accounts, dict) or not isinstance(raw_options, dict):
            msg = "Expected 'accounts' and 'options' to be dicts"
            raise TypeError(msg)

        accounts: dict[str, AccountConfig] = {}
        for name, cfg in raw_accounts.items():
            if not isinstance(cfg, dict):
                msg = f"Account config for '{name}' must be a dict"
                raise TypeError(msg)
            accounts[str(name)] = AccountConfig(**cfg)

        return cls(
            accounts=accounts,
            options=FileSystemOptions.from_dict(raw_options),
            scheme=str(data.get("scheme", "azbs")),
        )
