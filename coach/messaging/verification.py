"""
Tool: Phone Verification
Purpose: One-time codes proving a user owns the WhatsApp number they register

Codes live in a VerificationCodeStore: a keyed store whose entries expire
after a TTL measured on an injected clock, so expiry can be tested without
waiting and the store can be swapped for a shared one.

Delivery is delegated to a ``sender`` callable (phone_number, code). Without
a messaging gateway the default sender only logs the code, which is how codes
are read in development.

Usage:
    from coach.messaging.verification import VerificationService

    service = VerificationService()
    service.send_code("+573001234567")
    service.check_code("+573001234567", "123456")
"""

from __future__ import annotations

import logging
import secrets
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Generic, Hashable, TypeVar

import yaml

from coach.messaging import CONFIG_PATH
from coach.messaging.whatsapp import (
    clean_phone_number,
    extract_phone_number,
    is_valid_phone_number,
)

logger = logging.getLogger(__name__)

DEFAULT_CODE_TTL_SECONDS = 600
DEFAULT_CODE_LENGTH = 6
DEFAULT_MAX_ATTEMPTS = 5

V = TypeVar("V")


class VerificationCodeStore(Generic[V]):
    """
    Thread-safe key/value store with per-entry expiry.

    Args:
        clock: Returns the current time in seconds (default time.monotonic)
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[Hashable, tuple[V, float]] = {}
        self._lock = threading.Lock()

    def put(self, key: Hashable, value: V, ttl: float) -> None:
        """Store ``value`` under ``key`` for ``ttl`` seconds, replacing any previous value."""
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        with self._lock:
            self._entries[key] = (value, self._clock() + ttl)

    def get(self, key: Hashable) -> V | None:
        """Value for ``key``, or None if absent or expired. Expired entries are dropped."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def remove(self, key: Hashable) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def purge_expired(self) -> int:
        """Drop every expired entry. Returns how many were removed."""
        with self._lock:
            now = self._clock()
            expired = [key for key, (_, expires_at) in self._entries.items() if now >= expires_at]
            for key in expired:
                del self._entries[key]
            return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def log_code_sender(phone_number: str, code: str) -> None:
    """Development sender: writes the code to the log instead of delivering it."""
    logger.warning(f"Messaging gateway not configured; verification code for {phone_number}: {code}")


@dataclass
class PendingCode:
    """A code waiting to be checked and the wrong guesses made against it."""

    code: str
    attempts: int = 0


class VerificationService:
    """
    Issue and check one-time verification codes.

    Args:
        store: Where pending codes are kept (default: new in-memory store)
        sender: Delivers a code to a phone number
        ttl_seconds: How long a code stays valid
        code_length: Number of digits per code
        max_attempts: Wrong guesses allowed before the pending code is dropped
    """

    def __init__(
        self,
        store: VerificationCodeStore[PendingCode] | None = None,
        sender: Callable[[str, str], Any] | None = None,
        ttl_seconds: float = DEFAULT_CODE_TTL_SECONDS,
        code_length: int = DEFAULT_CODE_LENGTH,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.store = store if store is not None else VerificationCodeStore()
        self.sender = sender or log_code_sender
        self.ttl_seconds = ttl_seconds
        self.code_length = code_length
        self.max_attempts = max_attempts
        self._attempts_lock = threading.Lock()

    @staticmethod
    def normalize(phone_number: str) -> str:
        """Store key for a number, with or without the whatsapp: prefix."""
        return clean_phone_number(extract_phone_number(phone_number or ""))

    def generate_code(self) -> str:
        return "".join(secrets.choice("0123456789") for _ in range(self.code_length))

    def send_code(self, phone_number: str) -> dict[str, Any]:
        """
        Generate a code for ``phone_number``, remember it and deliver it.

        Returns:
            {"success": True, "code_sent": True, "phone_number": str, "expires_in": float}
            or {"success": False, "error": str}
        """
        if not is_valid_phone_number(phone_number):
            return {"success": False, "error": "invalid_phone_number"}

        key = self.normalize(phone_number)
        code = self.generate_code()

        try:
            self.sender(key, code)
        except Exception as e:
            logger.error(f"Error sending verification code to {key}: {e}")
            return {"success": False, "error": "delivery_failed"}

        self.store.put(key, PendingCode(code), self.ttl_seconds)
        logger.info(f"Verification code sent to {key}")

        return {
            "success": True,
            "code_sent": True,
            "phone_number": key,
            "expires_in": self.ttl_seconds,
        }

    def check_code(self, phone_number: str, code: str) -> dict[str, Any]:
        """
        Check a code against the one issued for ``phone_number``.

        A correct code is consumed. A wrong code counts as an attempt; after
        ``max_attempts`` wrong codes the pending code is dropped and a new
        one has to be sent.
        """
        if not code:
            return {"success": False, "error": "code_required"}

        key = self.normalize(phone_number)
        pending = self.store.get(key)

        if pending is None:
            return {"success": False, "error": "code_not_found"}

        if secrets.compare_digest(pending.code.encode(), code.strip().encode()):
            self.store.remove(key)
            return {"success": True, "verified": True, "phone_number": key}

        with self._attempts_lock:
            pending.attempts += 1
            exhausted = pending.attempts >= self.max_attempts

        if exhausted:
            self.store.remove(key)
            logger.warning(f"Too many invalid verification codes for {key}; code discarded")
            return {"success": False, "error": "too_many_attempts"}

        logger.warning(f"Invalid verification code for {key} ({pending.attempts}/{self.max_attempts})")
        return {"success": False, "error": "invalid_code"}


def load_config() -> dict[str, Any]:
    """Load the verification section of args/messaging.yaml."""
    if not CONFIG_PATH.exists():
        return {}
    with open(CONFIG_PATH, "r") as f:
        config = yaml.safe_load(f) or {}
    return config.get("verification", {}) or {}


def create_service(sender: Callable[[str, str], Any] | None = None) -> VerificationService:
    """Build a VerificationService using the TTL, code length and attempt limit from config."""
    config = load_config()
    return VerificationService(
        sender=sender,
        ttl_seconds=config.get("code_ttl_seconds", DEFAULT_CODE_TTL_SECONDS),
        code_length=config.get("code_length", DEFAULT_CODE_LENGTH),
        max_attempts=config.get("max_attempts", DEFAULT_MAX_ATTEMPTS),
    )
