# FastAPI Application Redirect
# This file redirects to the actual app in the attendance_audit package

from attendance_audit.main import app  # noqa: F401

# Run from the repository root: uvicorn main:app --host 0.0.0.0 --port 8001
