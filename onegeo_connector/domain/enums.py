"""Domain enums for service kinds and update frequencies."""

from enum import Enum


class ServiceKind(str, Enum):
    """Protocol family spoken by a catalog link."""

    WS = "WS"  # Bulk file server
    WFS = "WFS"  # Feature query service
    AFS = "AFS"  # Attribute/tile service


class Frequency(str, Enum):
    """Update frequency enumeration exposed to the host."""

    TRIENNIAL = "triennial"
    BIENNIAL = "biennial"
    ANNUAL = "annual"
    SEMIANNUAL = "semiannual"
    THREE_TIMES_A_YEAR = "threeTimesAYear"
    QUARTERLY = "quarterly"
    BIMONTHLY = "bimonthly"
    MONTHLY = "monthly"
    SEMIMONTHLY = "semimonthly"
    BIWEEKLY = "biweekly"
    THREE_TIMES_A_MONTH = "threeTimesAMonth"
    WEEKLY = "weekly"
    SEMIWEEKLY = "semiweekly"
    THREE_TIMES_A_WEEK = "threeTimesAWeek"
    DAILY = "daily"
    CONTINUOUS = "continuous"
    IRREGULAR = "irregular"


class FailureReason(str, Enum):
    """Why a single download candidate was abandoned."""

    NETWORK = "network"
    TIMEOUT = "timeout"
    HTTP_STATUS = "http_status"
    HTML_RESPONSE = "html_response"
