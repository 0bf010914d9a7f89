"""HTTP method definitions for ReverHTTP routes."""

from __future__ import annotations

from enum import Enum


class HttpMethod(Enum):
    """The HTTP methods a route may be declared with."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
