"""
Domain errors shared by the backend services and the frontend flow.

Every error carries a short, user-displayable ``user_message``. The
original cause (if any) is chained with ``raise ... from exc`` and only
ever logged, never shown.
"""

from typing import Optional


class VetNikoError(RuntimeError):
    """Base class for all Vet Niko domain errors."""

    default_message = "Beklenmeyen bir hata oluştu."

    def __init__(self, user_message: Optional[str] = None):
        self.user_message = user_message or self.default_message
        super().__init__(self.user_message)


class ConfigurationError(VetNikoError):
    """Raised when required configuration (API credential) is missing."""

    default_message = "Servis yapılandırması eksik."


class AdviceUnavailable(VetNikoError):
    """Raised when the veterinary advice could not be generated."""

    default_message = "Teşhis alınırken bir hata oluştu. Lütfen tekrar deneyin."


class SpeechSynthesisUnavailable(VetNikoError):
    """Raised when the report could not be converted to speech."""

    default_message = "Ses verisi alınamadı."


class ValidationError(VetNikoError):
    """Raised for invalid consultation input (unknown species, empty symptoms)."""

    default_message = "Lütfen geçerli bir hayvan türü ve belirtiler girin."
