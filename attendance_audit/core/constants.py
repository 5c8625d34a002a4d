"""
Service-wide constants
"""

SERVICE_NAME = "attendance-audit-backend"

# Adjustment reason bounds (measured on the trimmed text)
REASON_MIN_LENGTH = 10
REASON_MAX_LENGTH = 500

# Late minutes bounds for a LATE adjustment
LATE_MINUTES_MIN = 1
LATE_MINUTES_MAX = 180

# change_type written for every entry produced by the adjustment service
CHANGE_TYPE_MANUAL = "MANUAL_ADJUSTMENT"

# Generic audit log actions
ACTION_ADJUST = "ATTENDANCE_ADJUST"
ACTION_LOGIN = "AUTH_LOGIN_SUCCESS"
