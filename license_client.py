import asyncio
import json
import logging
from typing import List, Optional
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from config import Settings, settings as default_settings
from models import LicenseCheckResponse, LicenseQueryResult, UnusableResult, ValidationQuery

log = logging.getLogger("license_gate.client")


def mask_key(license_key: Optional[str]) -> str:
    """Keep only the last four characters of a license key for logging."""
    if not license_key:
        return ""
    return "*" * max(len(license_key) - 4, 0) + license_key[-4:]


class LicenseApiClient:
    """Sends a single license check to a single licensing backend."""

    def __init__(self, timeout: float = default_settings.LICENSE_API_TIMEOUT,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout
        self.transport = transport

    @staticmethod
    def build_url(endpoint: str, query: ValidationQuery) -> str:
        # The endpoint already has a query string (?wc-api=...),
        # so every parameter is appended with "&".
        return f"{endpoint}&{urlencode(query.model_dump())}"

    async def send(self, endpoint: str, query: ValidationQuery) -> LicenseQueryResult:
        """
        Query one mirror.

        Transport errors and unparseable bodies come back as UnusableResult;
        nothing is raised to the caller.
        """
        url = self.build_url(endpoint, query)
        log.debug("License check %s for %s (key %s)", endpoint, query.email, mask_key(query.license_key))

        try:
            # httpx timeouts apply per connect/read/write; the whole
            # transfer is bounded here.
            body = await asyncio.wait_for(self._fetch(url), self.timeout)

        except asyncio.TimeoutError:
            error_msg = f"License request timed out after {self.timeout}s"
            log.warning("License mirror %s: %s", endpoint, error_msg)
            return UnusableResult(raw=error_msg, error=error_msg)
        except httpx.HTTPError as e:
            error_msg = str(e) or e.__class__.__name__
            log.warning("License mirror %s unreachable: %s", endpoint, error_msg)
            return UnusableResult(raw=error_msg, error=error_msg)
        except Exception as e:
            error_msg = f"License request failed: {str(e)}"
            log.warning("License mirror %s: %s", endpoint, error_msg)
            return UnusableResult(raw=error_msg, error=error_msg)

        return self.parse_body(endpoint, body)

    async def _fetch(self, url: str) -> str:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.get(url, headers={"cache-control": "no-cache"})
            return response.text

    @staticmethod
    def parse_body(endpoint: str, body: str) -> LicenseQueryResult:
        try:
            data = json.loads(body)
        except ValueError:
            log.warning("License mirror %s returned a non-JSON body", endpoint)
            return UnusableResult(raw=body)

        try:
            return LicenseCheckResponse.model_validate(data)
        except ValidationError as e:
            log.warning("License mirror %s returned an unexpected payload: %s", endpoint, e.error_count())
            return UnusableResult(raw=body, error=str(e))


class LicenseApiGateway:
    """
    Fans a license check out to every configured mirror.

    All mirrors are queried concurrently. The first usable answer in mirror
    order wins; when none is usable the first mirror's answer is returned
    so the failure can still be reported.
    """

    def __init__(self, mirrors: Optional[List[str]] = None,
                 client: Optional[LicenseApiClient] = None,
                 config: Settings = default_settings):
        self.mirrors = list(mirrors if mirrors is not None else config.LICENSE_API_MIRRORS)
        self.client = client or LicenseApiClient(timeout=config.LICENSE_API_TIMEOUT)

    async def query(self, query: ValidationQuery) -> LicenseQueryResult:
        if not self.mirrors:
            log.error("No license mirrors configured")
            return UnusableResult(error="no license mirrors configured")

        results = await asyncio.gather(
            *(self.client.send(url, query) for url in self.mirrors)
        )
        # mirror order, duplicate URLs included
        for url, response in zip(self.mirrors, results):
            if response.usable:
                log.debug("Using license response from %s", url)
                return response

        log.info("No usable license response from %d mirror(s)", len(self.mirrors))
        return results[0]
