"""
Submissions Module

Consent submissions with image uploads:
1. Validation of fields and file parts before storage
2. File storage under per-submission directories
3. Transactional insert of the student and its images, with background
   removal of the files if the transaction fails

API Endpoints:
- POST /submit - multipart consent submission
"""

from .router import router

__all__ = ["router"]
