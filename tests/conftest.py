"""Shared fixtures for telemetry tests"""
from typing import Dict, List, Optional, Tuple
from unittest.mock import patch
import httpx
import pytest


@pytest.fixture(autouse=True)
def no_filesystem_markers():
    """Hide the host's Kubernetes and cloud marker files from every test"""
    with patch("environment.base.path_exists", return_value=False) as mock_exists:
        yield mock_exists


@pytest.fixture
def unreachable_transport() -> httpx.MockTransport:
    """Transport behaving like a host with no metadata service"""
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("metadata service unreachable", request=request)
    return httpx.MockTransport(handler)


@pytest.fixture
def metadata_transport():
    """Build a transport answering fixed (method, path) routes and recording requests"""
    def build(routes: Dict[Tuple[str, str], Tuple[int, str]],
              calls: Optional[List[httpx.Request]] = None) -> httpx.MockTransport:
        def handler(request: httpx.Request) -> httpx.Response:
            if calls is not None:
                calls.append(request)
            route = routes.get((request.method, request.url.path))
            if route is None:
                return httpx.Response(404, text="not found")
            status_code, body = route
            return httpx.Response(status_code, text=body)
        return httpx.MockTransport(handler)
    return build
