"""OpenTelemetry metrics and logs for the ledger."""

import logging

from opentelemetry import metrics
from opentelemetry._logs import set_logger_provider
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http._log_exporter import OTLPLogExporter
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource

from ledger._version import VERSION
from ledger.config import Settings


# Module-level state
_initialized = False
_meter = None
_log_handler = None

# Counters (cumulative)
_trades_total = None
_trade_value_total = None
_listings_total = None
_accounts_created_total = None
_assets_created_total = None
_partial_commits_total = None
_inconsistent_entries_total = None


def setup_telemetry(settings: Settings) -> bool:
    """Initialize OpenTelemetry metrics and log export.

    Returns True if telemetry was initialized, False if disabled.
    """
    global _initialized, _meter, _log_handler
    global _trades_total, _trade_value_total, _listings_total
    global _accounts_created_total, _assets_created_total
    global _partial_commits_total, _inconsistent_entries_total

    if _initialized:
        return True

    if not settings.otlp_enabled:
        return False

    resource = Resource.create({
        "service.name": "asset-ledger",
        "service.version": VERSION,
    })

    exporter = OTLPMetricExporter(endpoint=settings.otlp_endpoint)
    reader = PeriodicExportingMetricReader(
        exporter,
        export_interval_millis=settings.otlp_export_interval,
    )
    provider = MeterProvider(resource=resource, metric_readers=[reader])
    metrics.set_meter_provider(provider)

    _meter = metrics.get_meter("asset_ledger", VERSION)

    _trades_total = _meter.create_counter(
        "ledger_trades_total",
        description="Total number of assets bought",
        unit="1",
    )

    _trade_value_total = _meter.create_counter(
        "ledger_trade_value_total",
        description="Total currency moved by trades",
        unit="currency",
    )

    _listings_total = _meter.create_counter(
        "ledger_listings_total",
        description="Total number of assets listed for sale",
        unit="1",
    )

    _accounts_created_total = _meter.create_counter(
        "ledger_accounts_created_total",
        description="Total number of accounts created",
        unit="1",
    )

    _assets_created_total = _meter.create_counter(
        "ledger_assets_created_total",
        description="Total number of assets created",
        unit="1",
    )

    _partial_commits_total = _meter.create_counter(
        "ledger_partial_commits_total",
        description="Multi-write operations interrupted after some writes landed",
        unit="1",
    )

    _inconsistent_entries_total = _meter.create_counter(
        "ledger_inconsistent_entries_total",
        description="Index entries skipped because their record did not resolve",
        unit="1",
    )

    # === LOGS ===
    logs_endpoint = settings.otlp_endpoint.replace("/v1/metrics", "/v1/logs")
    log_exporter = OTLPLogExporter(endpoint=logs_endpoint)
    logger_provider = LoggerProvider(resource=resource)
    logger_provider.add_log_record_processor(BatchLogRecordProcessor(log_exporter))
    set_logger_provider(logger_provider)

    _log_handler = LoggingHandler(
        level=logging.INFO,
        logger_provider=logger_provider,
    )

    _initialized = True
    return True


def get_log_handler() -> LoggingHandler | None:
    """Get the OTLP logging handler to attach to Python loggers."""
    return _log_handler


def is_enabled() -> bool:
    """Check if telemetry is initialized and enabled."""
    return _initialized


# --- Counter update functions ---

def record_trade(asset_id: str, price: int) -> None:
    """Record a completed buy."""
    if not _initialized:
        return

    attributes = {"asset_id": asset_id}
    _trades_total.add(1, attributes)
    _trade_value_total.add(price, attributes)


def record_listing(asset_id: str) -> None:
    """Record an asset being listed for sale."""
    if not _initialized:
        return

    _listings_total.add(1, {"asset_id": asset_id})


def record_account_created() -> None:
    """Record an account creation."""
    if not _initialized:
        return

    _accounts_created_total.add(1)


def record_asset_created() -> None:
    """Record an asset creation."""
    if not _initialized:
        return

    _assets_created_total.add(1)


def record_partial_commit(scope: str) -> None:
    """Record a multi-write sequence interrupted part way.

    scope is the index name for creates, or "trade" for buys.
    """
    if not _initialized:
        return

    _partial_commits_total.add(1, {"scope": scope})


def record_inconsistent_entry(index_name: str) -> None:
    """Record an index entry that did not resolve to a record."""
    if not _initialized:
        return

    _inconsistent_entries_total.add(1, {"index": index_name})
