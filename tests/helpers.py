"""
Shared helpers for the License Gate tests: mocked licensing mirrors.
"""

import json

import httpx

from config import Settings
from license_client import LicenseApiClient, LicenseApiGateway
from license_validator import LicenseValidator

MIRROR_1 = "https://licenses.example.com/?wc-api=software-api"
MIRROR_2 = "https://licenses.example.com/en/?wc-api=software-api"
MIRROR_3 = "https://backup.example.net/?wc-api=software-api"


def license_payload(*activations, success=True):
    """Build a software API "check" response body from (platform, version) pairs."""
    return {
        "success": success,
        "activations": [
            {"activation_platform": platform, "software_version": version}
            for platform, version in activations
        ],
    }


def mirror_transport(responses, calls=None):
    """
    MockTransport answering per mirror.

    responses maps a mirror URL to a dict (sent as JSON), a str (sent as
    the raw body) or an exception instance (raised as a transport error).
    """
    by_base = {url.split("?")[0]: answer for url, answer in responses.items()}

    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        answer = by_base[str(request.url).split("?")[0]]
        if isinstance(answer, Exception):
            raise answer
        if isinstance(answer, dict):
            return httpx.Response(200, text=json.dumps(answer))
        return httpx.Response(200, text=answer)

    return httpx.MockTransport(handler)


def make_gateway(responses, calls=None):
    """LicenseApiGateway over mocked mirrors, in the order of `responses`."""
    client = LicenseApiClient(timeout=5, transport=mirror_transport(responses, calls))
    return LicenseApiGateway(mirrors=list(responses), client=client)


def make_validator(responses, calls=None, **overrides):
    """LicenseValidator wired to mocked mirrors."""
    config = Settings(LICENSE_API_MIRRORS=list(responses), **overrides)
    client = LicenseApiClient(timeout=5, transport=mirror_transport(responses, calls))
    gateway = LicenseApiGateway(client=client, config=config)
    return LicenseValidator(gateway=gateway, config=config)
