"""OTP extraction from message text."""

from .pattern_matcher import (
    OTP_PATTERNS,
    HTMLTextExtractor,
    OTPPatternMatcher,
    extract_otp,
    html_to_text,
)

__all__ = [
    "OTP_PATTERNS",
    "HTMLTextExtractor",
    "OTPPatternMatcher",
    "extract_otp",
    "html_to_text",
]
