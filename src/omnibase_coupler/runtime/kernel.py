# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Coupler Kernel - bootstrap for the coupling engine operator.

The kernel is responsible for:
    1. Loading runtime configuration from an optional YAML file and environment
    2. Connecting to the cluster API (in-cluster or kubeconfig)
    3. Creating and starting the InMemoryEventBus and its handler workers
    4. Building the CouplerEngine and the Plug, Socket and DeferredResource
       controllers
    5. Setting up graceful shutdown signal handlers
    6. Running the controllers until shutdown is requested

Usage:
    # Run with defaults
    python -m omnibase_coupler.runtime.kernel

    # Run with a config file
    COUPLER_CONFIG=/etc/coupler/config.yaml python -m omnibase_coupler.runtime.kernel

    # Or via the installed entrypoint
    omnibase-coupler

Environment Variables:
    COUPLER_CONFIG: Path to a YAML config file (optional)
    COUPLER_LOG_LEVEL: Logging level (default: INFO)
    MAX_CONCURRENT_RECONCILES: Reconcile workers per controller (default: 3)
    POD_NAMESPACE: Namespace used when a reference omits one (default: kube-system)
    WATCH_NAMESPACE: Restrict watches to one namespace (default: all)
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import sys
import time
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_package_version
from pathlib import Path
from typing import Optional
from uuid import uuid4

import yaml
from pydantic import ValidationError

from omnibase_coupler.constants import API_VERSION
from omnibase_coupler.coupler.coupler_engine import CouplerEngine
from omnibase_coupler.coupler.coupler_event_workers import CouplerEventWorkers
from omnibase_coupler.enums import EnumInfraTransportType
from omnibase_coupler.errors import (
    CouplerError,
    ModelInfraErrorContext,
    ProtocolConfigurationError,
)
from omnibase_coupler.event_bus import InMemoryEventBus
from omnibase_coupler.handlers import HandlerApparatus, HandlerKubernetesCluster
from omnibase_coupler.models import ModelCouplerConfig
from omnibase_coupler.protocols import ProtocolClusterClient
from omnibase_coupler.runtime.controller import Controller
from omnibase_coupler.runtime.reconciler_deferred_resource import (
    ReconcilerDeferredResource,
)
from omnibase_coupler.runtime.reconciler_plug import ReconcilerPlug
from omnibase_coupler.runtime.reconciler_socket import ReconcilerSocket
from omnibase_coupler.utils import parse_env_int, parse_env_str

logger = logging.getLogger(__name__)

try:
    KERNEL_VERSION = get_package_version("omnibase-coupler")
except PackageNotFoundError:
    KERNEL_VERSION = "unknown"

CONFIG_PATH_ENV = "COUPLER_CONFIG"
LOG_LEVEL_ENV = "COUPLER_LOG_LEVEL"
SHUTDOWN_GRACE_SECONDS = 30.0


def load_config(path: Optional[Path] = None) -> ModelCouplerConfig:
    """Load the runtime configuration.

    Configuration Precedence:
        - Environment variables override file values
        - File values (``COUPLER_CONFIG`` or ``path``) override defaults
        - Model defaults apply when neither is set

    Args:
        path: Explicit config file; defaults to ``$COUPLER_CONFIG`` if set.

    Returns:
        Validated, frozen ModelCouplerConfig.

    Raises:
        ProtocolConfigurationError: If the file cannot be read or parsed, an
            environment value is malformed, or the merged values fail
            validation.
    """
    if path is None:
        configured = parse_env_str(CONFIG_PATH_ENV)
        path = Path(configured) if configured else None

    context = ModelInfraErrorContext(
        transport_type=EnumInfraTransportType.RUNTIME,
        operation="load_config",
        target_name=str(path) if path is not None else "environment",
    )

    raw: dict[str, object] = {}
    if path is not None:
        logger.info("Loading coupler config from %s", path)
        try:
            with open(path, encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ProtocolConfigurationError(
                f"Failed to parse coupler config YAML at {path}: {e}",
                context=context,
                config_path=str(path),
            ) from e
        except OSError as e:
            raise ProtocolConfigurationError(
                f"Failed to read coupler config at {path}: {e}",
                context=context,
                config_path=str(path),
            ) from e
        if not isinstance(loaded, dict):
            raise ProtocolConfigurationError(
                f"Coupler config at {path} must be a mapping",
                context=context,
                config_path=str(path),
            )
        raw.update(loaded)

    max_reconciles = parse_env_int("MAX_CONCURRENT_RECONCILES", min_value=1)
    if max_reconciles is not None:
        raw["max_concurrent_reconciles"] = max_reconciles
    pod_namespace = parse_env_str("POD_NAMESPACE")
    if pod_namespace is not None:
        raw["pod_namespace"] = pod_namespace
    watch_namespace = parse_env_str("WATCH_NAMESPACE")
    if watch_namespace is not None:
        raw["watch_namespace"] = watch_namespace

    try:
        config = ModelCouplerConfig.model_validate(raw)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}"
            for err in e.errors()
        ]
        raise ProtocolConfigurationError(
            f"Coupler config validation failed: {e.error_count()} error(s). "
            f"First errors: {'; '.join(errors[:3])}",
            context=context,
            validation_errors=errors,
        ) from e

    logger.debug(
        "Coupler config loaded",
        extra={
            "max_concurrent_reconciles": config.max_concurrent_reconciles,
            "pod_namespace": config.pod_namespace,
            "watch_namespace": config.watch_namespace,
        },
    )
    return config


def build_controllers(
    client: ProtocolClusterClient,
    engine: CouplerEngine,
    config: ModelCouplerConfig,
) -> tuple[Controller, Controller, Controller]:
    """Build the Plug, Socket and DeferredResource controllers.

    The engine is wired to the Plug controller's queue so Socket passes can
    put affected Plugs back on it.
    """
    plug_controller = Controller(
        client,
        ReconcilerPlug(engine),
        api_version=API_VERSION,
        namespace=config.watch_namespace,
        max_concurrent_reconciles=config.max_concurrent_reconciles,
    )
    socket_controller = Controller(
        client,
        ReconcilerSocket(engine),
        api_version=API_VERSION,
        namespace=config.watch_namespace,
        max_concurrent_reconciles=config.max_concurrent_reconciles,
    )
    deferred_controller = Controller(
        client,
        ReconcilerDeferredResource(client, engine.applier, config=config),
        api_version=API_VERSION,
        namespace=config.watch_namespace,
        max_concurrent_reconciles=config.max_concurrent_reconciles,
    )
    engine.set_plug_enqueuer(plug_controller.enqueue)
    logger.debug(
        "Controllers built",
        extra={
            "kinds": [
                plug_controller.kind,
                socket_controller.kind,
                deferred_controller.kind,
            ]
        },
    )
    return plug_controller, socket_controller, deferred_controller


async def bootstrap() -> int:
    """Run the operator until SIGINT or SIGTERM.

    Returns:
        Exit code: 0 after a clean shutdown, 1 on a startup or runtime failure.
    """
    correlation_id = uuid4()
    cluster: Optional[HandlerKubernetesCluster] = None
    apparatus: Optional[HandlerApparatus] = None
    bus: Optional[InMemoryEventBus] = None
    workers: Optional[CouplerEventWorkers] = None
    controllers: tuple[Controller, ...] = ()
    start_time = time.time()

    try:
        config = load_config()

        cluster = HandlerKubernetesCluster.from_environment()
        await cluster.initialize()

        apparatus = HandlerApparatus(timeout_seconds=config.apparatus_timeout_seconds)
        await apparatus.initialize()

        bus = InMemoryEventBus(
            max_queue_size=config.bus_max_queue_size,
            delivery_timeout_seconds=config.bus_delivery_timeout_seconds,
        )
        await bus.start()

        engine = CouplerEngine(cluster, bus, config=config, apparatus=apparatus)
        workers = CouplerEventWorkers(
            bus, engine.handlers, max_workers=config.bus_max_workers
        )
        await workers.start()

        controllers = build_controllers(cluster, engine, config)

        shutdown_event = asyncio.Event()
        loop = asyncio.get_running_loop()

        def handle_shutdown(sig: signal.Signals) -> None:
            logger.info(
                "Received %s, initiating graceful shutdown... (correlation_id=%s)",
                sig.name,
                correlation_id,
            )
            shutdown_event.set()

        if sys.platform != "win32":
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.add_signal_handler(sig, handle_shutdown, sig)
        else:
            def windows_handler(signum: int, frame: object) -> None:
                logger.info(
                    "Received %s, initiating graceful shutdown... (correlation_id=%s)",
                    signal.Signals(signum).name,
                    correlation_id,
                )
                loop.call_soon_threadsafe(shutdown_event.set)

            signal.signal(signal.SIGINT, windows_handler)

        for controller in controllers:
            await controller.start()

        logger.info("=" * 60)
        logger.info("Coupler Kernel v%s", KERNEL_VERSION)
        logger.info("Pod namespace: %s", config.pod_namespace)
        logger.info("Watching: %s", config.watch_namespace or "all namespaces")
        logger.info("Reconcile workers: %d per kind", config.max_concurrent_reconciles)
        logger.info("=" * 60)
        logger.info(
            "Coupler started in %.3fs (correlation_id=%s)",
            time.time() - start_time,
            correlation_id,
        )

        await shutdown_event.wait()
        return 0

    except ProtocolConfigurationError as e:
        logger.exception(
            "Coupler configuration failed (correlation_id=%s)",
            correlation_id,
            extra={"error_type": type(e).__name__, "error_code": e.error_code.name},
        )
        return 1

    except CouplerError as e:
        logger.exception(
            "Coupler runtime error (correlation_id=%s)",
            correlation_id,
            extra={"error_type": type(e).__name__, "error_code": e.error_code.name},
        )
        return 1

    except Exception as e:
        logger.exception(
            "Coupler failed with unexpected error: %s (correlation_id=%s)",
            e,
            correlation_id,
            extra={"error_type": type(e).__name__},
        )
        return 1

    finally:
        shutdown_start = time.time()
        try:
            await asyncio.wait_for(
                _shutdown(controllers, workers, bus, apparatus, cluster),
                timeout=SHUTDOWN_GRACE_SECONDS,
            )
        except TimeoutError:
            logger.warning(
                "Graceful shutdown timed out after %s seconds (correlation_id=%s)",
                SHUTDOWN_GRACE_SECONDS,
                correlation_id,
            )
        logger.info(
            "Coupler stopped in %.3fs (correlation_id=%s)",
            time.time() - shutdown_start,
            correlation_id,
        )


async def _shutdown(
    controllers: tuple[Controller, ...],
    workers: Optional[CouplerEventWorkers],
    bus: Optional[InMemoryEventBus],
    apparatus: Optional[HandlerApparatus],
    cluster: Optional[HandlerKubernetesCluster],
) -> None:
    # Order: controllers, workers, bus, transports.
    for controller in controllers:
        await controller.stop()
    if workers is not None:
        await workers.stop()
    if bus is not None:
        await bus.shutdown()
    if apparatus is not None:
        await apparatus.shutdown()
    if cluster is not None:
        await cluster.shutdown()


def configure_logging() -> None:
    """Configure logging from ``COUPLER_LOG_LEVEL`` (default INFO).

    Called before the config is loaded, so the level comes from the
    environment rather than the config file.
    """
    log_level = os.getenv(LOG_LEVEL_ENV, "INFO").upper()

    valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
    if log_level not in valid_levels:
        print(
            f"Warning: Invalid {LOG_LEVEL_ENV} '{log_level}', using INFO. "
            f"Valid levels: {', '.join(sorted(valid_levels))}",
            file=sys.stderr,
        )
        log_level = "INFO"

    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def main() -> None:
    """Entry point for ``omnibase-coupler`` and ``python -m``."""
    configure_logging()
    logger.info("Coupler Kernel v%s initializing...", KERNEL_VERSION)
    exit_code = asyncio.run(bootstrap())
    sys.exit(exit_code)


__all__ = [
    "KERNEL_VERSION",
    "bootstrap",
    "build_controllers",
    "configure_logging",
    "load_config",
    "main",
]


if __name__ == "__main__":
    main()
