"""
Configuration field table and the resolved configuration record.

``CORE_FIELDS`` lists every field resolved for each process. The
transaction-service fields in ``TX_SERVICE_FIELDS`` are resolved only when
``TX_SERVICE_ADDRESS`` is set. Each field carries its path inside a remote
configuration document, which uses camelCase keys:

    {"appId": "...", "whisper": {"ping": {"enabled": true, ...}}, ...}
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from hexbytes import HexBytes

from ..utils.json_helpers import freeze, thaw
from .coercion import SemanticType, coerce
from .fields import FieldSpec, resolve_fields

JSON = SemanticType.JSON
INTEGER = SemanticType.INTEGER
BOOLEAN = SemanticType.BOOLEAN

REDACTED = "********"

TX_SERVICE_GATE = "TX_SERVICE_ADDRESS"


def _heartbeat_enabled(resolved: Mapping[str, Any]) -> bool:
    return resolved.get("WHISPER_PING_ENABLED") is True


CORE_FIELDS: Tuple[FieldSpec, ...] = (
    # Main config
    FieldSpec("APP_ID", path=("appId",)),
    FieldSpec("PG_URL", path=("dbUrl",), secret=True),
    # Environment & version
    FieldSpec("NODE_ENV", path=("nodeEnv",)),
    FieldSpec("PIPELINE_STAGE", required=False, default="production", path=("pipelineStage",)),
    FieldSpec("SOURCE_VERSION", required=False, default="Unspecified", path=("sourceVersion",)),
    # Access key
    FieldSpec("API_KEY_SHA256", path=("apiKey",), secret=True),
    # Logging
    FieldSpec("LOG_WHISPER_SQL", BOOLEAN, required=False, default=False, path=("logs", "whisper", "sql")),
    FieldSpec("LOG_WHISPER_PINGS", BOOLEAN, required=False, default=False, path=("logs", "whisper", "pings")),
    FieldSpec("LOG_LEVEL", required=False, path=("logs", "level")),
    # Attester/requester policy
    FieldSpec("APPROVED_ATTESTERS", JSON, required=False, path=("approved_attesters",)),
    FieldSpec("APPROVED_REQUESTERS", JSON, required=False, path=("approved_requesters",)),
    FieldSpec("ATTESTER_MIN_REWARDS", JSON, path=("attester_rewards",)),
    # Providers and contracts
    FieldSpec("PROVIDERS", JSON, path=("providers",)),
    FieldSpec("CONTRACTS", JSON, path=("contracts",)),
    # Alerting
    FieldSpec("SENTRY_DSN", path=("sentryDSN",), secret=True),
    # Response webhooks
    FieldSpec("WEBHOOK_KEY", path=("webhook", "key"), secret=True),
    FieldSpec("WEBHOOK_HOST", path=("webhook", "address")),
    # Whisper messaging
    FieldSpec("WHISPER_PROVIDER", path=("whisper", "provider")),
    FieldSpec("WHISPER_PASSWORD", path=("whisper", "password"), secret=True),
    FieldSpec("WHISPER_TOPIC_PREFIX", path=("whisper", "topicPrefix")),
    FieldSpec("WHISPER_POLL_INTERVAL", INTEGER, required=False, default=5000, path=("whisper", "pollInterval")),
    # Heartbeat, intervals are PostgreSQL interval strings
    FieldSpec("WHISPER_PING_ENABLED", BOOLEAN, required=False, default=False, path=("whisper", "ping", "enabled")),
    FieldSpec("WHISPER_PING_INTERVAL", required=False, default="1 minute", path=("whisper", "ping", "interval")),
    FieldSpec(
        "WHISPER_PING_ALERT_INTERVAL",
        required=False,
        default="5 minutes",
        path=("whisper", "ping", "alertInterval"),
    ),
    FieldSpec(
        "WHISPER_PING_PASSWORD",
        required=False,
        path=("whisper", "ping", "password"),
        depends_on=("WHISPER_PING_ENABLED",),
        required_when=_heartbeat_enabled,
        secret=True,
    ),
    # Signing key
    FieldSpec("PRIMARY_ETH_ADDRESS", path=("owner", "address")),
    FieldSpec("PRIMARY_ETH_PRIVKEY", path=("owner", "key"), secret=True),
    # Optional log shipping
    FieldSpec("LOGSTASH", JSON, required=False, path=("logstash",), secret=True),
)

TX_SERVICE_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec(TX_SERVICE_GATE, path=("txService", "address")),
    FieldSpec("TX_SERVICE_KEY", path=("txService", "key"), secret=True),
    FieldSpec("TX_SERVICE_KEY_SHA256", path=("txService", "webhookKeySha"), secret=True),
)

ALL_FIELDS: Tuple[FieldSpec, ...] = CORE_FIELDS + TX_SERVICE_FIELDS


def resolve_values(source: Mapping[str, Any], silent: bool = False, defaults: bool = True) -> Dict[str, Any]:
    """
    Resolve the full field table against a source mapping.

    The transaction-service block is resolved only when its address is set;
    otherwise none of its fields appear in the result.
    """
    values = resolve_fields(source, CORE_FIELDS, silent=silent, defaults=defaults)
    if source.get(TX_SERVICE_GATE):
        values.update(resolve_fields(source, TX_SERVICE_FIELDS, silent=silent, defaults=defaults))
    return values


def flatten_document(document: Mapping[str, Any], specs: Iterable[FieldSpec] = ALL_FIELDS) -> Dict[str, Any]:
    """Map a nested configuration document to field values keyed by field name."""
    values: Dict[str, Any] = {}
    for spec in specs:
        node: Any = document
        for key in spec.path:
            if not isinstance(node, Mapping) or key not in node:
                break
            node = node[key]
        else:
            values[spec.name] = node
    return values


def nest_values(values: Mapping[str, Any], specs: Iterable[FieldSpec] = ALL_FIELDS, redact: bool = False) -> Dict[str, Any]:
    """Inverse of :func:`flatten_document`."""
    document: Dict[str, Any] = {}
    for spec in specs:
        if spec.name not in values:
            continue
        value = thaw(values[spec.name])
        if redact and spec.secret and value is not None:
            value = REDACTED
        node = document
        for key in spec.path[:-1]:
            node = node.setdefault(key, {})
        node[spec.path[-1]] = value
    return document


@dataclass(frozen=True)
class WhisperLogFlags:
    sql: bool = False
    pings: bool = False


@dataclass(frozen=True)
class LogSettings:
    whisper: WhisperLogFlags
    level: Optional[str] = None


@dataclass(frozen=True)
class WebhookSettings:
    key: str
    address: str


@dataclass(frozen=True)
class HeartbeatSettings:
    """Liveness probe settings consumed by the messaging layer."""

    enabled: bool = False
    interval: str = "1 minute"
    alert_interval: str = "5 minutes"
    password: Optional[str] = None


@dataclass(frozen=True)
class WhisperSettings:
    provider: str
    password: str
    topic_prefix: str
    poll_interval: int
    ping: HeartbeatSettings


@dataclass(frozen=True)
class OwnerCredentials:
    """Signing key material for the primary Ethereum account."""

    address: str
    key: str

    @property
    def key_bytes(self) -> HexBytes:
        """The private key decoded to raw bytes."""
        return coerce(self.key, SemanticType.BYTES)


@dataclass(frozen=True)
class TxServiceSettings:
    address: str
    key: str
    webhook_key_sha: str


@dataclass(frozen=True)
class ResolvedConfig:
    """
    Fully resolved environment configuration.

    Instances are immutable; JSON-valued members are read-only mappings and
    tuples. Build one with :meth:`from_values`.
    """

    app_id: str
    db_url: str
    node_env: str
    pipeline_stage: Optional[str]
    source_version: Optional[str]
    api_key: str
    logs: LogSettings
    approved_attesters: Optional[Mapping[str, Any]]
    approved_requesters: Optional[Mapping[str, Any]]
    attester_rewards: Mapping[str, Any]
    providers: Mapping[str, str]
    contracts: Mapping[str, Mapping[str, Any]]
    sentry_dsn: str
    webhook: WebhookSettings
    whisper: WhisperSettings
    owner: OwnerCredentials
    logstash: Optional[Mapping[str, Any]] = None
    tx_service: Optional[TxServiceSettings] = None
    values: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_values(cls, values: Mapping[str, Any]) -> "ResolvedConfig":
        """
        Build the record from strictly resolved field values.

        Args:
            values: Output of :func:`resolve_values` with ``silent=False``
        """
        v = {name: freeze(value) for name, value in values.items()}
        tx_service = None
        if v.get(TX_SERVICE_GATE):
            tx_service = TxServiceSettings(
                address=v[TX_SERVICE_GATE],
                key=v["TX_SERVICE_KEY"],
                webhook_key_sha=v["TX_SERVICE_KEY_SHA256"],
            )
        return cls(
            app_id=v["APP_ID"],
            db_url=v["PG_URL"],
            node_env=v["NODE_ENV"],
            pipeline_stage=v["PIPELINE_STAGE"],
            source_version=v["SOURCE_VERSION"],
            api_key=v["API_KEY_SHA256"],
            logs=LogSettings(
                whisper=WhisperLogFlags(sql=v["LOG_WHISPER_SQL"], pings=v["LOG_WHISPER_PINGS"]),
                level=v["LOG_LEVEL"],
            ),
            approved_attesters=v["APPROVED_ATTESTERS"],
            approved_requesters=v["APPROVED_REQUESTERS"],
            attester_rewards=v["ATTESTER_MIN_REWARDS"],
            providers=v["PROVIDERS"],
            contracts=v["CONTRACTS"],
            sentry_dsn=v["SENTRY_DSN"],
            webhook=WebhookSettings(key=v["WEBHOOK_KEY"], address=v["WEBHOOK_HOST"]),
            whisper=WhisperSettings(
                provider=v["WHISPER_PROVIDER"],
                password=v["WHISPER_PASSWORD"],
                topic_prefix=v["WHISPER_TOPIC_PREFIX"],
                poll_interval=v["WHISPER_POLL_INTERVAL"],
                ping=HeartbeatSettings(
                    enabled=v["WHISPER_PING_ENABLED"],
                    interval=v["WHISPER_PING_INTERVAL"],
                    alert_interval=v["WHISPER_PING_ALERT_INTERVAL"],
                    password=v["WHISPER_PING_PASSWORD"],
                ),
            ),
            owner=OwnerCredentials(address=v["PRIMARY_ETH_ADDRESS"], key=v["PRIMARY_ETH_PRIVKEY"]),
            logstash=v["LOGSTASH"],
            tx_service=tx_service,
            values=freeze(v),
        )

    def to_document(self, redact: bool = False) -> Dict[str, Any]:
        """
        Convert to the nested document shape served by a remote source.

        Args:
            redact: Replace secret values with a placeholder
        """
        return nest_values(self.values, redact=redact)
