"""
blogapi.services._shared.ports
==============================

*Ports* (hexagonal interfaces) the service layer depends on.

- :mod:`token_provider`:
    Defines :class:`~.TokenProvider`, the abstraction for JWT signing and
    decoding. The Flask-JWT-Extended adapter lives under ``blogapi.infra``.
"""

from __future__ import annotations

from .token_provider import TokenProvider

__all__ = ["TokenProvider"]
