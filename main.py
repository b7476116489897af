import logging
from typing import Any, Dict

from fastapi import FastAPI, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from authorization import AuthorizationGate, LicenseGateError, LicenseRequiredError
from database import get_db, ValidationAttempt
from license_client import mask_key
from license_validator import LicenseValidator
from config import settings
from models import (
    AuthorizeDownloadRequest,
    AuthorizeDownloadResponse,
    LicenseCheckRequest,
    LicenseCheckResult,
    MetadataFilterRequest,
    UpdateRequestParams,
    HealthCheckResponse
)

logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s [%(name)s] %(message)s")
log = logging.getLogger("license_gate.api")

app = FastAPI(
    title="License Gate Service",
    description="License validation for plugin update metadata and downloads",
    version=settings.APP_VERSION
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

def get_validator() -> LicenseValidator:
    return LicenseValidator(config=settings)

def _log_validation_attempt(db: Session, action: str, params: UpdateRequestParams, email: str, result: str):
    """
    Record an authorization decision in the request log.
    """
    log_entry = ValidationAttempt(
        action=action,
        email=email,
        product_id=params.product_id,
        platform=params.platform,
        license_key=mask_key(params.license_key),
        result=result
    )
    db.add(log_entry)
    db.commit()

@app.exception_handler(LicenseGateError)
async def license_gate_error_handler(request: Request, exc: LicenseGateError):
    log.info("Refused %s: %s", request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

# API Endpoints
@app.post("/api/license/check", response_model=LicenseCheckResult)
async def check_license(
    request: LicenseCheckRequest,
    validator: LicenseValidator = Depends(get_validator)
):
    """
    Check a license against the licensing backends.

    Returns only the decision; backend failures and rejected keys both
    come back as invalid.
    """
    valid = await validator.validate(
        request.email,
        request.platform,
        request.license_key,
        request.product_id,
        request.software_version,
        request.package_version
    )
    return {"valid": valid}

@app.post("/api/update/authorize", response_model=AuthorizeDownloadResponse)
async def authorize_download(
    request: AuthorizeDownloadRequest,
    db: Session = Depends(get_db),
    validator: LicenseValidator = Depends(get_validator)
):
    """
    Pre-download hook for the update server.

    Responds 403 with "license required" when no key was sent and with
    "license not valid" when the key was rejected.
    """
    params = request.params
    gate = AuthorizationGate(validator)

    try:
        await gate.check_download(params, request.package_version)
    except LicenseGateError as e:
        result = "license_required" if isinstance(e, LicenseRequiredError) else "denied"
        _log_validation_attempt(db, params.action, params, params.email, result)
        raise

    _log_validation_attempt(db, params.action, params, params.email, "allowed")
    return {"allowed": True}

@app.post("/api/update/metadata")
async def filter_metadata(
    request: MetadataFilterRequest,
    db: Session = Depends(get_db),
    validator: LicenseValidator = Depends(get_validator)
) -> Dict[str, Any]:
    """
    Metadata filter for the update server.

    Adds the license credentials to download_url when the license is valid,
    otherwise returns the metadata untouched.
    """
    gate = AuthorizationGate(validator)
    meta = await gate.filter_metadata(request.meta, request.params)

    result = "filtered" if meta is not request.meta else "unfiltered"
    _log_validation_attempt(db, "metadata", request.params, request.params.license_email, result)
    return meta

@app.get("/health", response_model=HealthCheckResponse)
async def health_check():
    """
    Health check endpoint for container orchestration.
    """
    return {
        "status": "healthy",
        "service": settings.SERVICE_NAME,
        "version": settings.APP_VERSION,
        "mirrors": len(settings.LICENSE_API_MIRRORS)
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
