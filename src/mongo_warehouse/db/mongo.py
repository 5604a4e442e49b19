"""Connect to the warehouse MongoDB server using parameter-store defaults."""

from __future__ import annotations

import time
from typing import Optional, Tuple, TypeVar

from pydantic import ValidationError
from pymongo import MongoClient
from pymongo.errors import ConnectionFailure, OperationFailure

from mongo_warehouse.core.cancellation import CancellationToken, Deadline, process_token, watching_shutdown
from mongo_warehouse.core.config import Settings, get_settings
from mongo_warehouse.core.errors import AuthenticationError, ConnectionTimeoutError, InvalidSettingsError
from mongo_warehouse.core.logging import get_logger
from mongo_warehouse.core.params import (
    AUTHENTICATE_KEY,
    DATABASE_NAME_KEY,
    HOST_KEY,
    PASSWORD_KEY,
    PORT_KEY,
    USER_KEY,
    EnvironmentParameterStore,
    ParameterStore,
)
from mongo_warehouse.models.connection import ConnectionSettings

logger = get_logger(module="mongo")

T = TypeVar("T")

# Hooks replaced by tests to run the retry loop on simulated time.
_clock = time.monotonic


def _pause(token: CancellationToken, seconds: float) -> None:
    token.wait(seconds)


def default_parameter_store(settings: Settings | None = None) -> ParameterStore:
    settings = settings or get_settings()
    return EnvironmentParameterStore(prefix=settings.parameter_prefix)


def resolve_setting(explicit: T, key: str, default: T, params: ParameterStore) -> T:
    """Return ``explicit`` unless it is unset, else the parameter or ``default``.

    "Unset" means the falsy sentinel of the type: ``""``, ``0`` or ``False``.
    """

    if explicit:
        return explicit
    value = params.get(key, default)
    shown = ("****" if value else "") if key == PASSWORD_KEY else value
    logger.debug("Initialized {key} to {value} (default was {default})", key=key, value=shown, default=default)
    return value


def resolve_connection_settings(
    params: ParameterStore | None = None,
    host: str = "",
    port: int = 0,
    timeout: float = 0.0,
    database_name: str = "",
    authenticate: bool = False,
    user: str = "",
    password: str = "",
    settings: Settings | None = None,
) -> ConnectionSettings:
    settings = settings or get_settings()
    params = params if params is not None else default_parameter_store(settings)
    try:
        return ConnectionSettings(
            host=resolve_setting(host, HOST_KEY, settings.default_host, params),
            port=resolve_setting(port, PORT_KEY, settings.default_port, params),
            timeout_seconds=timeout or settings.connect_timeout_seconds,
            database_name=resolve_setting(database_name, DATABASE_NAME_KEY, settings.default_database_name, params),
            authenticate=resolve_setting(authenticate, AUTHENTICATE_KEY, settings.default_authenticate, params),
            user=resolve_setting(user, USER_KEY, settings.default_user, params),
            password=resolve_setting(password, PASSWORD_KEY, settings.default_password, params),
        )
    except ValidationError as exc:
        raise InvalidSettingsError(exc) from exc


def _new_client(conn: ConnectionSettings, timeout_ms: int, **credentials) -> MongoClient:
    return MongoClient(
        host=conn.host,
        port=conn.port,
        serverSelectionTimeoutMS=timeout_ms,
        connectTimeoutMS=timeout_ms,
        **credentials,
    )


def _authenticate(conn: ConnectionSettings, timeout_ms: int) -> Tuple[Optional[MongoClient], str]:
    """Open a credentialed client; return it, or None and the server's reason.

    Connection failures propagate so the caller treats them like any other
    failed attempt.
    """

    if not conn.user:
        return None, "no user configured"
    client = _new_client(
        conn,
        timeout_ms,
        username=conn.user,
        password=conn.password,
        authSource=conn.database_name or "admin",
    )
    try:
        client.admin.command("ping")
    except OperationFailure as exc:
        client.close()
        return None, str(exc)
    except ConnectionFailure:
        client.close()
        raise
    return client, ""


def make_connection(
    params: ParameterStore | None = None,
    host: str = "",
    port: int = 0,
    timeout: float = 0.0,
    database_name: str = "",
    authenticate: bool = False,
    user: str = "",
    password: str = "",
    *,
    cancel_token: CancellationToken | None = None,
    settings: Settings | None = None,
) -> MongoClient:
    """Return a connected client, retrying until ``timeout`` seconds elapse.

    Unset arguments are looked up in ``params`` and then in the hard defaults.
    The loop stops early when ``cancel_token`` or the process-wide shutdown
    token is cancelled. Raises ``ConnectionTimeoutError`` if no attempt
    succeeded in time. With ``auth_failure_policy="warn"`` rejected
    credentials are only logged and the unauthenticated client is returned.
    """

    settings = settings or get_settings()
    conn = resolve_connection_settings(
        params, host, port, timeout, database_name, authenticate, user, password, settings
    )
    for field, value in conn.redacted().items():
        logger.info("{field}: {value}", field=field, value=value)

    token = CancellationToken.any_of(process_token, cancel_token)
    deadline = Deadline.after(conn.timeout_seconds, clock=_clock)
    client: MongoClient | None = None

    with watching_shutdown():
        while not token.cancelled and not deadline.expired:
            timeout_ms = max(1, min(settings.server_selection_timeout_ms, int(deadline.remaining() * 1000)))
            candidate = _new_client(conn, timeout_ms)
            try:
                logger.debug("Connecting to db at {address}", address=conn.address)
                candidate.admin.command("ping")
                if conn.authenticate:
                    logger.info("Authenticating as {user} on {database}", user=conn.user, database=conn.database_name)
                    authed, reason = _authenticate(conn, timeout_ms)
                    if authed is None:
                        if settings.auth_failure_policy == "raise":
                            candidate.close()
                            raise AuthenticationError(conn.database_name, conn.user, reason)
                        logger.error("Mongo authentication failed: {reason}", reason=reason)
                    else:
                        candidate.close()
                        candidate = authed
                client = candidate
                logger.info("Connected to {address}", address=conn.address)
                break
            except ConnectionFailure as exc:
                candidate.close()
                logger.debug("Attempt to reach {address} failed: {exc}", address=conn.address, exc=exc)
                _pause(token, settings.retry_interval_seconds)

    if client is None or deadline.expired:
        if client is not None:
            client.close()
        raise ConnectionTimeoutError(conn.address, conn.timeout_seconds)

    logger.debug("Successfully connected to db")
    return client


def drop_database(
    name: str,
    host: str = "",
    port: int = 0,
    timeout: float = 0.0,
    *,
    params: ParameterStore | None = None,
    settings: Settings | None = None,
) -> None:
    """Connect with default credentials and drop database ``name``."""

    settings = settings or get_settings()
    client = make_connection(
        params, host, port, timeout or settings.drop_timeout_seconds, settings=settings
    )
    try:
        client.drop_database(name)
        logger.info("Dropped database {name}", name=name)
    finally:
        client.close()
