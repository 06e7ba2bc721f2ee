"""Trust ``X-Forwarded-*`` headers from a fixed number of reverse proxies."""

from __future__ import annotations

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix


def init_app(app: Flask) -> None:
    """
    Wrap the WSGI app in :class:`ProxyFix` unless ``USE_PROXYFIX`` is off.

    ``request.remote_addr`` keys the login rate limit and is stored on every
    audit entry, so ``PROXYFIX_HOPS`` has to equal the number of trusted
    proxies. With too many hops a client can spoof its address.
    """
    if not app.config.get("USE_PROXYFIX", True):
        return
    hops = int(app.config.get("PROXYFIX_HOPS", 1))
    app.wsgi_app = ProxyFix(  # type: ignore[method-assign]
        app.wsgi_app, x_for=hops, x_proto=hops, x_host=hops, x_prefix=hops
    )
