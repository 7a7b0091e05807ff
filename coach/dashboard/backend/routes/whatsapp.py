"""
WhatsApp API Routes

Phone number verification for WhatsApp registration:
- POST /api/whatsapp/verify - Basic validation, send a code, or check a code
- GET  /api/whatsapp/verify - Service description
"""

import logging
from datetime import datetime
from functools import lru_cache
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from coach.messaging.verification import VerificationService, create_service
from coach.messaging.whatsapp import format_whatsapp_number, is_valid_phone_number

logger = logging.getLogger(__name__)

router = APIRouter()


class VerifyRequest(BaseModel):
    """Body for /verify. Without ``action`` the number is only validated."""

    phone_number: str = Field(..., min_length=1)
    action: Optional[Literal["send_code", "verify_code"]] = None
    code: Optional[str] = None


@lru_cache(maxsize=1)
def get_verification_service() -> VerificationService:
    """Process-wide verification service; override in tests."""
    return create_service()


@router.post("/verify")
async def verify_phone(
    body: VerifyRequest,
    service: VerificationService = Depends(get_verification_service),
):
    """Validate a phone number, send it a code, or check a code."""
    if body.action == "send_code":
        result = service.send_code(body.phone_number)
        if not result["success"]:
            raise HTTPException(status_code=400, detail=result["error"])
        return {
            "success": True,
            "code_sent": True,
            "phone_number": result["phone_number"],
            "expires_in": result["expires_in"],
            "message": "Verification code sent",
        }

    if body.action == "verify_code":
        if not body.code:
            raise HTTPException(status_code=400, detail="code_required")

        result = service.check_code(body.phone_number, body.code)
        if not result["success"]:
            raise HTTPException(status_code=400, detail=result["error"])
        logger.info(f"Phone number {result['phone_number']} verified")
        return {
            "success": True,
            "verified": True,
            "phone_number": result["phone_number"],
            "whatsapp_format": format_whatsapp_number(result["phone_number"]),
            "message": "Phone number verified",
        }

    if not is_valid_phone_number(body.phone_number):
        raise HTTPException(status_code=400, detail="invalid_phone_number")

    return {
        "valid": True,
        "phone_number": body.phone_number,
        "whatsapp_format": format_whatsapp_number(body.phone_number),
        "message": "Phone number is valid",
    }


@router.get("/verify")
async def verification_service_info():
    """Describe the verification service."""
    return {
        "service": "WhatsApp Phone Verification",
        "status": "active",
        "timestamp": datetime.now().isoformat(),
        "actions": ["send_code", "verify_code", "basic_validation"],
    }
