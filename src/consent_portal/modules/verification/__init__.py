"""
Verification Module

One-time code (OTP) proof of control of an institutional email address.

API Endpoints:
- POST /send-otp - Issue a code (10 minute expiry) and email it
- POST /verify-otp - Validate and consume the newest active code

Background Jobs (via APScheduler):
- purge_expired_codes: deletes codes past their expiry
"""

from .jobs import register_verification_jobs
from .router import router

__all__ = ["router", "register_verification_jobs"]
