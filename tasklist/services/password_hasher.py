"""
Password hashing and verification.

Uses bcrypt: each hash embeds its own random salt and cost factor, so
`verify` needs nothing but the stored string and old hashes stay valid when
the configured cost changes.
"""

import asyncio

import bcrypt

from tasklist.config import MAX_BCRYPT_ROUNDS, MIN_BCRYPT_ROUNDS

# bcrypt only reads the first 72 bytes of its input.
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    def __init__(self, rounds: int = 12):
        if not MIN_BCRYPT_ROUNDS <= rounds <= MAX_BCRYPT_ROUNDS:
            raise ValueError(
                f"bcrypt rounds must be between {MIN_BCRYPT_ROUNDS} and {MAX_BCRYPT_ROUNDS}, got {rounds}"
            )
        self.rounds = rounds
        # Used to spend the same time on logins for unknown emails.
        self._dummy_hash = self.hash("dummy-password-for-timing")

    def hash(self, password: str) -> str:
        """Hash a plain text password with a fresh salt."""
        password_bytes = password.encode("utf-8")
        if len(password_bytes) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password exceeds {MAX_PASSWORD_BYTES} bytes")
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password_bytes, salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Constant-time check of a password against a stored hash.

        Malformed hashes and over-long passwords verify as False.
        """
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except (ValueError, TypeError, AttributeError):
            return False

    def needs_rehash(self, password_hash: str) -> bool:
        """True when the hash was produced with a different cost factor."""
        try:
            # Format: $2b$<cost>$<22 char salt><31 char digest>
            cost = int(password_hash.split("$")[2])
        except (IndexError, ValueError, AttributeError):
            return True
        return cost != self.rounds

    def burn_verification(self, password: str) -> bool:
        """Run a verification that always fails, for timing parity."""
        self.verify(password, self._dummy_hash)
        return False

    async def hash_async(self, password: str) -> str:
        return await asyncio.to_thread(self.hash, password)

    async def verify_async(self, password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(self.verify, password, password_hash)

    async def burn_verification_async(self, password: str) -> bool:
        return await asyncio.to_thread(self.burn_verification, password)
