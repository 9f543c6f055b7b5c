"""TempMail relay - disposable inbox polling with realtime OTP notifications."""

# Application version (SemVer)
__version__ = "1.0.0"
__license__ = "MIT"
