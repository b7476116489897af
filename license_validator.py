import logging
from typing import Optional

from config import Settings, settings as default_settings
from license_client import LicenseApiGateway, mask_key
from models import ValidationQuery
from versioning import version_at_least

log = logging.getLogger("license_gate.validator")


class LicenseValidator:
    def __init__(self, gateway: Optional[LicenseApiGateway] = None,
                 config: Settings = default_settings):
        self.config = config
        self.gateway = gateway or LicenseApiGateway(config=config)

    async def validate(
        self,
        email: str,
        platform: Optional[str],
        license_key: str,
        product_id: str,
        software_version: Optional[str] = None,
        package_version: Optional[str] = None,
    ) -> bool:
        """
        Check if a license is valid for a product, platform and version.

        software_version is the installed version reported to the backend.
        package_version, when given, is the version being handed out and is
        what the activations have to cover; otherwise software_version is.
        An empty license key is not rejected here, callers check for it first.
        """
        software_version = software_version or self.config.DEFAULT_SOFTWARE_VERSION
        query = ValidationQuery(
            email=email or "",
            license_key=license_key or "",
            product_id=product_id or "",
            request="check",
            software_version=software_version,
        )

        response = await self.gateway.query(query)

        # no data
        if not response.usable:
            log.info("License %s for %s: no usable response", mask_key(license_key), product_id)
            return False

        activations = response.activations

        # check platform
        if platform and platform not in [a.activation_platform for a in activations]:
            log.info("License %s not activated on %s", mask_key(license_key), platform)
            return False

        if not activations:
            log.warning(
                "License %s for %s has no activations, treating as %s",
                mask_key(license_key), product_id,
                "valid" if self.config.ALLOW_EMPTY_ACTIVATIONS else "invalid",
            )
            return self.config.ALLOW_EMPTY_ACTIVATIONS

        # check software version
        threshold = package_version or software_version
        for activation in activations:
            if version_at_least(activation.software_version, threshold):
                return True

        log.info("License %s does not cover version %s", mask_key(license_key), threshold)
        return False
