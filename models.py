from pydantic import BaseModel, ConfigDict, field_validator
from typing import Optional, Dict, Any, List, Union

# Licensing backend wire format
class ValidationQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    email: str = ""
    license_key: str = ""
    product_id: str = ""
    request: str = "check"
    software_version: str = "1.0"

class Activation(BaseModel):
    activation_platform: Optional[str] = ""
    software_version: Optional[str] = ""

    @field_validator("activation_platform", "software_version", mode="before")
    @classmethod
    def null_as_empty(cls, value):
        # Backends send null for unset fields
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)

class LicenseCheckResponse(BaseModel):
    success: bool
    activations: List[Activation]

    @property
    def usable(self) -> bool:
        return self.success is True

class UnusableResult(BaseModel):
    """Transport failure or a body that is not a license check response."""
    raw: str = ""
    error: Optional[str] = None

    @property
    def usable(self) -> bool:
        return False

LicenseQueryResult = Union[LicenseCheckResponse, UnusableResult]

# Update server boundary
class UpdateRequestParams(BaseModel):
    action: str = ""
    email: str = ""
    license_email: str = ""
    platform: str = ""
    license_key: str = ""
    product_id: str = ""
    installed_version: str = ""

class AuthorizeDownloadRequest(BaseModel):
    params: UpdateRequestParams
    package_version: Optional[str] = None

class AuthorizeDownloadResponse(BaseModel):
    allowed: bool

class MetadataFilterRequest(BaseModel):
    meta: Dict[str, Any]
    params: UpdateRequestParams

class LicenseCheckRequest(BaseModel):
    email: str = ""
    platform: str = ""
    license_key: str
    product_id: str
    software_version: Optional[str] = None
    package_version: Optional[str] = None

class LicenseCheckResult(BaseModel):
    valid: bool

class HealthCheckResponse(BaseModel):
    status: str
    service: str
    version: str
    mirrors: int
