"""TLS helpers for HTTPS transports and X.509 client authentication."""

from __future__ import annotations

import logging
import ssl

from .errors import KCCTLSError

_LOGGER = logging.getLogger(__name__)


def new_client_ssl_context(*, insecure_skip_verify: bool = False) -> ssl.SSLContext:
    """Create the TLS client configuration used for https:// servers.

    Verification is on unless insecure_skip_verify is set, which disables
    certificate and hostname validation and logs a warning.
    """
    context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
    if insecure_skip_verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
        _LOGGER.warning(
            "TLS verification is disabled, connections are susceptible to "
            "man-in-the-middle attacks"
        )
    return context


def load_x509_key_pair(
    cert_file: str,
    key_file: str,
    context: ssl.SSLContext | None = None,
) -> ssl.SSLContext:
    """Load a PEM certificate and private key as the TLS client certificate.

    The pair replaces any client certificate of the provided context. If no
    context is given a new verifying client context is created.

    Args:
        cert_file: Path to the PEM encoded certificate (chain).
        key_file: Path to the PEM encoded private key. May be the same file
            as cert_file.
        context: TLS configuration to update.

    Returns:
        The updated or newly created context.

    Raises:
        KCCTLSError: If either file is unreadable or the pair is malformed.
    """
    if context is None:
        context = new_client_ssl_context()
    try:
        context.load_cert_chain(certfile=cert_file, keyfile=key_file)
    except (OSError, ssl.SSLError) as err:
        raise KCCTLSError(
            f"Failed to load X.509 key pair from {cert_file!r} and {key_file!r}: {err}"
        ) from err
    _LOGGER.debug("Loaded TLS client certificate from %s", cert_file)
    return context
