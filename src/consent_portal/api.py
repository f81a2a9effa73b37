from fastapi import APIRouter

from consent_portal.modules.submissions import router as submissions_router
from consent_portal.modules.verification import router as verification_router

api_router = APIRouter()

api_router.include_router(verification_router, tags=["Email Verification"])

api_router.include_router(submissions_router, tags=["Submissions"])
