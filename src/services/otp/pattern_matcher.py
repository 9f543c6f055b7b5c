"""Pattern matching utilities for OTP extraction.

This module provides utilities for extracting one-time passcodes from
message text, including HTML-to-text reduction and regex-based matching.
"""

import re
from html.parser import HTMLParser
from typing import List, Optional, Pattern

from loguru import logger


class HTMLTextExtractor(HTMLParser):
    """Extract plain text from HTML content."""

    def __init__(self):
        super().__init__()
        self.text = []
        self.in_script = False
        self.in_style = False

    def handle_starttag(self, tag, attrs):
        if tag.lower() == "script":
            self.in_script = True
        elif tag.lower() == "style":
            self.in_style = True

    def handle_endtag(self, tag):
        if tag.lower() == "script":
            self.in_script = False
        elif tag.lower() == "style":
            self.in_style = False

    def handle_data(self, data):
        if not self.in_script and not self.in_style:
            self.text.append(data)

    def get_text(self) -> str:
        return " ".join(self.text)


def html_to_text(html: str) -> str:
    """Reduce an HTML body to its visible text."""
    parser = HTMLTextExtractor()
    parser.feed(html)
    parser.close()
    return parser.get_text()


# Checked in order; the first pattern with a match wins. The bare digit run
# comes first, so keyword patterns only decide when no bare 4-6 digit run
# exists (e.g. the code is glued to a longer digit string).
OTP_PATTERNS: List[str] = [
    r"\b\d{4,6}\b",  # 4-6 digit OTP
    r"code[:\s]*(\d{4,6})",  # Code: 123456
    r"otp[:\s]*(\d{4,6})",  # OTP: 123456
    r"verification[:\s]*(\d{4,6})",  # Verification: 123456
    r"(\d{4,6})\s*is your code",  # 123456 is your code
    r"your code is\s*(\d{4,6})",  # Your code is 123456
]

MIN_OTP_LENGTH = 4

_DIGITS = re.compile(r"\d+", re.ASCII)


class OTPPatternMatcher:
    """Regex-based OTP code extractor."""

    DEFAULT_PATTERNS: List[str] = OTP_PATTERNS

    def __init__(self, custom_patterns: Optional[List[str]] = None):
        """
        Initialize OTP pattern matcher.

        Args:
            custom_patterns: Optional list of custom regex patterns, in priority order
        """
        patterns = custom_patterns or self.DEFAULT_PATTERNS
        self._patterns: List[Pattern] = [
            re.compile(p, re.IGNORECASE | re.ASCII) for p in patterns
        ]

    @property
    def patterns(self) -> List[Pattern]:
        return list(self._patterns)

    def extract_otp(self, text: Optional[str]) -> Optional[str]:
        """
        Extract OTP code from text.

        The code is the first digit run inside the first matching pattern's
        match; runs shorter than ``MIN_OTP_LENGTH`` are rejected and the
        next pattern is tried.

        Args:
            text: Text to search for OTP

        Returns:
            Extracted OTP code or None
        """
        if not text:
            return None

        for pattern in self._patterns:
            match = pattern.search(text)
            if not match:
                continue
            digits = _DIGITS.search(match.group(0))
            if digits and len(digits.group(0)) >= MIN_OTP_LENGTH:
                return digits.group(0)

        logger.debug(f"No OTP found in {len(text)} characters of text")
        return None


_default_matcher = OTPPatternMatcher()


def extract_otp(text: Optional[str]) -> Optional[str]:
    """Extract an OTP with the default pattern list."""
    return _default_matcher.extract_otp(text)
