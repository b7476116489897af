"""
Authorization hooks for the update server.

The update server calls check_download() before serving a package file and
filter_metadata() before returning package metadata. Both defer the actual
decision to LicenseValidator.
"""

import logging
from typing import Any, Dict, Mapping, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from license_client import mask_key
from license_validator import LicenseValidator
from models import UpdateRequestParams

log = logging.getLogger("license_gate.authorization")


class LicenseGateError(Exception):
    status_code = 403
    message = "Sorry, your license is not valid."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.message
        super().__init__(self.message)


class LicenseRequiredError(LicenseGateError):
    message = "You must provide a license key to download this plugin."


class InvalidLicenseError(LicenseGateError):
    message = "Sorry, your license is not valid."


def add_query_arg(args: Mapping[str, Any], url: str) -> str:
    """Add (or replace) query parameters on a URL."""
    parts = urlsplit(url)
    query = dict(parse_qsl(parts.query, keep_blank_values=True))
    # None and False values are skipped
    query.update({key: str(value) for key, value in args.items() if value is not None and value is not False})
    return urlunsplit(parts._replace(query=urlencode(query)))


class AuthorizationGate:
    def __init__(self, validator: LicenseValidator):
        self.validator = validator

    async def check_download(self, params: UpdateRequestParams,
                             package_version: Optional[str] = None) -> None:
        """
        Refuse a download unless a valid license key was supplied.

        Raises LicenseRequiredError for a missing key and InvalidLicenseError
        for a key the licensing backend does not accept. Actions other than
        "download" are not checked.
        """
        if params.action != "download":
            return

        if not params.license_key:
            log.info("Download of %s refused: no license key", params.product_id)
            raise LicenseRequiredError()

        is_valid = await self.validator.validate(
            params.email,
            params.platform,
            params.license_key,
            params.product_id,
            params.installed_version,
            package_version,
        )
        if not is_valid:
            log.info("Download of %s refused for key %s", params.product_id, mask_key(params.license_key))
            raise InvalidLicenseError()

    async def filter_metadata(self, meta: Dict[str, Any], params: UpdateRequestParams) -> Dict[str, Any]:
        """
        Add the license credentials to the download URL if the license is valid.

        Without a valid license the metadata is returned as it came in.
        """
        if not params.license_key:
            return meta

        package_version = meta.get("version")
        is_valid = await self.validator.validate(
            params.license_email,
            params.platform,
            params.license_key,
            params.product_id,
            params.installed_version,
            str(package_version) if package_version else None,
        )
        if not is_valid:
            return meta

        # append required fields to the download URL
        args = {
            "email": params.license_email,
            "license_key": params.license_key,
            "platform": params.platform,
            "product_id": params.product_id,
        }
        filtered = dict(meta)
        filtered["download_url"] = add_query_arg(args, meta.get("download_url", ""))
        return filtered
