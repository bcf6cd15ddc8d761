"""Secret hashing for user credentials.

Uses bcrypt with per-secret salts.
"""

import bcrypt


class BcryptSecretHasher:
    """SecretHasher implementation backed by bcrypt."""

    def __init__(self, rounds: int = 12):
        """Initialize the hasher.

        Args:
            rounds: bcrypt work factor (log2 of the iteration count)
        """
        self._rounds = rounds

    def hash(self, secret: str) -> str:
        """Hash a secret using bcrypt with a fresh salt.

        Args:
            secret: The plaintext secret to hash

        Returns:
            The bcrypt hash as a string
        """
        digest = bcrypt.hashpw(secret.encode(), bcrypt.gensalt(rounds=self._rounds))
        return digest.decode()

    def verify(self, secret: str, digest: str) -> bool:
        """Verify a secret against its hash using constant-time comparison.

        Args:
            secret: The plaintext secret to verify
            digest: The bcrypt hash to verify against

        Returns:
            True if the secret matches the hash, False otherwise
        """
        try:
            return bcrypt.checkpw(secret.encode(), digest.encode())
        except ValueError:
            # Malformed or foreign digest
            return False
