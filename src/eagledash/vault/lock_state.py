# Vault - Lock State Machine
#
# NO_PIN_CONFIGURED --bootstrap_pin--> UNLOCKED
# UNLOCKED --lock / auto-lock--> LOCKED
# LOCKED --unlock(correct PIN)--> UNLOCKED
#
# Auto-lock fires AUTO_LOCK_SECONDS after the last explicit unlock or
# bootstrap. It is enforced by a background timer and re-checked against
# the clock on every state read. An explicit lock always wins; a timer that
# fires after the state already left UNLOCKED does nothing.

import hmac
import logging
import threading
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from .encryption import verify_pin
from .exceptions import IncorrectPin, PinNotConfigured, VaultLocked, WeakPin
from .models import LockState

logger = logging.getLogger(__name__)

AUTO_LOCK_SECONDS = 5 * 60


class VaultLock:
    """
    Tracks whether the vault's secrets may be revealed.

    Holds the stored PIN (persisted alongside the vault) and, while
    unlocked, the session copy of the PIN used for decryption.

    Args:
        stored_pin: Previously configured PIN, or None if never set.
        auto_lock_seconds: Inactivity window before relocking.
        clock: Monotonic time source (seconds). Injectable for tests.
        on_auto_lock: Called (without arguments) after an automatic relock.
    """

    def __init__(
        self,
        stored_pin: Optional[str] = None,
        auto_lock_seconds: float = AUTO_LOCK_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        on_auto_lock: Optional[Callable[[], None]] = None,
    ):
        self.auto_lock_seconds = auto_lock_seconds
        self._clock = clock
        self._on_auto_lock = on_auto_lock

        self._mutex = threading.RLock()
        self._stored_pin = stored_pin or None
        self._session_pin: Optional[str] = None
        self._state = LockState.LOCKED if self._stored_pin else LockState.NO_PIN_CONFIGURED
        self._unlocked_at: Optional[float] = None
        self.unlocked_since: Optional[datetime] = None

        self._timer: Optional[threading.Timer] = None
        self._generation = 0

    # ------------------------------------------------------------------
    # State queries
    # ------------------------------------------------------------------

    @property
    def state(self) -> LockState:
        self._expire_if_due()
        with self._mutex:
            return self._state

    @property
    def is_unlocked(self) -> bool:
        return self.state == LockState.UNLOCKED

    @property
    def pin_configured(self) -> bool:
        with self._mutex:
            return self._stored_pin is not None

    @property
    def stored_pin(self) -> Optional[str]:
        with self._mutex:
            return self._stored_pin

    @property
    def session_pin(self) -> Optional[str]:
        """PIN cached for the unlocked session, None otherwise."""
        self._expire_if_due()
        with self._mutex:
            return self._session_pin

    def can_reveal(self) -> bool:
        """Reveal is allowed while unlocked, or when no PIN exists at all."""
        return self.state in (LockState.UNLOCKED, LockState.NO_PIN_CONFIGURED)

    def pin_for_reveal(self) -> Optional[str]:
        """
        Session PIN to decrypt with (None when no PIN is configured).

        Raises:
            VaultLocked: The vault is locked.
        """
        self._expire_if_due()
        with self._mutex:
            if self._state == LockState.LOCKED:
                raise VaultLocked()
            return self._session_pin

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def bootstrap_pin(self, pin: str) -> LockState:
        """
        Configure the PIN and open a session.

        Replacing an existing PIN requires an unlocked session; existing
        encrypted entries are not re-encrypted.

        Raises:
            WeakPin: PIN shorter than the minimum length.
            VaultLocked: A PIN is already set and the vault is locked.
        """
        is_valid, error_msg = verify_pin(pin)
        if not is_valid:
            raise WeakPin(error_msg)

        self._expire_if_due()
        with self._mutex:
            if self._stored_pin is not None and self._state != LockState.UNLOCKED:
                raise VaultLocked("Vault is locked. Unlock with the current PIN before setting a new one.")
            self._stored_pin = pin
            self._open_session(pin)
            return self._state

    def unlock(self, attempt: str) -> LockState:
        """
        Open a session if the attempt matches the stored PIN.

        Raises:
            PinNotConfigured: No PIN has been set yet.
            IncorrectPin: Attempt does not match; state is unchanged.
        """
        self._expire_if_due()
        with self._mutex:
            if self._stored_pin is None:
                raise PinNotConfigured()

            if not hmac.compare_digest(
                attempt.encode("utf-8"), self._stored_pin.encode("utf-8")
            ):
                raise IncorrectPin()

            self._open_session(attempt)
            return self._state

    def lock(self) -> LockState:
        """Close the session. Idempotent; no-op without a PIN."""
        with self._mutex:
            self._close_session()
            return self._state

    def shutdown(self) -> None:
        """Cancel any pending auto-lock timer."""
        with self._mutex:
            self._cancel_timer()

    # ------------------------------------------------------------------
    # Internals (call with _mutex held)
    # ------------------------------------------------------------------

    def _open_session(self, pin: str) -> None:
        self._session_pin = pin
        self._state = LockState.UNLOCKED
        self._unlocked_at = self._clock()
        self.unlocked_since = datetime.now(timezone.utc)
        self._arm_timer()

    def _close_session(self) -> None:
        self._cancel_timer()
        self._session_pin = None
        self._unlocked_at = None
        self.unlocked_since = None
        if self._state == LockState.UNLOCKED:
            self._state = LockState.LOCKED

    def _arm_timer(self) -> None:
        self._cancel_timer()
        self._generation += 1
        timer = threading.Timer(
            self.auto_lock_seconds, self._on_timer, args=(self._generation,)
        )
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _cancel_timer(self) -> None:
        # Bumping the generation also disarms a timer that is already running
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timer(self, generation: int) -> None:
        with self._mutex:
            if generation != self._generation or self._state != LockState.UNLOCKED:
                return
            self._close_session()
        self._notify_auto_lock()

    def _expire_if_due(self) -> None:
        with self._mutex:
            if self._state != LockState.UNLOCKED or self._unlocked_at is None:
                return
            if self._clock() - self._unlocked_at < self.auto_lock_seconds:
                return
            self._close_session()
        self._notify_auto_lock()

    def _notify_auto_lock(self) -> None:
        logger.info("Vault auto-locked after %ss without unlock", self.auto_lock_seconds)
        if self._on_auto_lock is not None:
            self._on_auto_lock()
