"""
Encrypted Client Storage.

Durable key/value slots backing the Session Store.  The client persists
exactly one slot, the bearer token, under a fixed key; absence of the
key means "unauthenticated".

Security model
--------------
- Values are encrypted with AES-256-GCM (confidentiality + integrity).
- The key is derived at runtime from machine identity (hostname + OS
  username) via PBKDF2-HMAC-SHA256 with a per-installation random salt.
  The key is held in memory only, never written to disk.
- A slot that fails to decrypt (copied database, changed OS account,
  tampering) is treated as absent and deleted.

Storage layout (``client_storage`` table)::

    client_storage
    ├── key             TEXT PRIMARY KEY
    ├── encrypted_value BLOB
    ├── nonce           BLOB
    └── tag             BLOB
"""

from __future__ import annotations

import getpass
import os
import platform
import socket
import stat
import threading
from pathlib import Path
from typing import Optional

from Crypto.Cipher import AES
from Crypto.Hash import SHA256
from Crypto.Protocol.KDF import PBKDF2

from superhub.database import LocalDatabase
from superhub.logger import StructuredLogger


class TokenStore:
    """AES-GCM encrypted key/value slots in the local SQLite database.

    Parameters
    ----------
    db:
        Initialised ``LocalDatabase`` whose schema has been created.
    logger:
        Structured logger.
    salt_path:
        Location of the per-installation salt file.
    kdf_iterations:
        PBKDF2 iteration count.
    """

    _DEFAULT_ITERATIONS: int = 600_000
    _KEY_LENGTH: int = 32  # 256 bits
    _SALT_LENGTH: int = 32

    def __init__(
        self,
        db: LocalDatabase,
        logger: StructuredLogger,
        salt_path: Optional[Path] = None,
        kdf_iterations: int = _DEFAULT_ITERATIONS,
    ) -> None:
        self._db: LocalDatabase = db
        self._logger: StructuredLogger = logger
        self._salt_path: Path = salt_path or (Path.home() / ".superhub_storage_salt")
        self._kdf_iterations: int = kdf_iterations
        self._key: Optional[bytes] = None
        self._key_lock: threading.Lock = threading.Lock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get(self, key: str) -> Optional[str]:
        """Return the decrypted value stored under *key*, or ``None``."""
        row = self._db.sqlite.execute(
            "SELECT encrypted_value, nonce, tag FROM client_storage WHERE key = ?",
            (key,),
        ).fetchone()
        if row is None:
            return None

        try:
            cipher = AES.new(self._derive_key(), AES.MODE_GCM, nonce=row["nonce"])
            plaintext: bytes = cipher.decrypt_and_verify(row["encrypted_value"], row["tag"])
            return plaintext.decode("utf-8")
        except (ValueError, KeyError, UnicodeDecodeError) as exc:
            self._logger.warning(
                "Stored value for '%s' could not be decrypted (corrupted data "
                "or machine identity changed): %s. Discarding it.",
                key,
                exc,
            )
            self.remove(key)
            return None

    def set(self, key: str, value: str) -> None:
        """Encrypt *value* and upsert it under *key*.

        Raises
        ------
        OSError
            If the salt file cannot be created; the value is not stored.
        """
        cipher = AES.new(self._derive_key(), AES.MODE_GCM)
        ciphertext, tag = cipher.encrypt_and_digest(value.encode("utf-8"))

        with self._db.write_lock:
            self._db.sqlite.execute(
                """
                INSERT INTO client_storage (key, encrypted_value, nonce, tag)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    encrypted_value = excluded.encrypted_value,
                    nonce           = excluded.nonce,
                    tag             = excluded.tag,
                    updated_at      = CURRENT_TIMESTAMP
                """,
                (key, ciphertext, cipher.nonce, tag),
            )
            self._db.sqlite.commit()
        self._logger.debug("Stored encrypted value for '%s'.", key)

    def remove(self, key: str) -> None:
        """Delete *key*.  Safe to call when the key is absent."""
        with self._db.write_lock:
            self._db.sqlite.execute("DELETE FROM client_storage WHERE key = ?", (key,))
            self._db.sqlite.commit()
        self._logger.debug("Removed stored value for '%s'.", key)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _derive_key(self) -> bytes:
        """Derive (once) the 256-bit AES key from machine identity + salt.

        ``hostname:username`` binds the key to this machine so a copied
        database is useless elsewhere; the random salt supplies the
        entropy.  The key stays in memory for the process lifetime.
        """
        with self._key_lock:
            if self._key is None:
                password: str = f"{socket.gethostname()}:{getpass.getuser()}"
                self._key = PBKDF2(
                    password=password,
                    salt=self._get_or_create_salt(),
                    dkLen=self._KEY_LENGTH,
                    count=self._kdf_iterations,
                    hmac_hash_module=SHA256,
                )
            return self._key

    def _get_or_create_salt(self) -> bytes:
        """Return the per-installation salt, creating it on first run.

        Raises
        ------
        OSError
            If the salt file cannot be read or written.
        """
        if self._salt_path.exists():
            data: bytes = self._salt_path.read_bytes()
            if len(data) == self._SALT_LENGTH:
                return data
            self._logger.warning(
                "Salt file has unexpected length (%d); regenerating.", len(data),
            )

        salt: bytes = os.urandom(self._SALT_LENGTH)
        self._salt_path.write_bytes(salt)
        if platform.system() != "Windows":
            self._salt_path.chmod(stat.S_IRUSR | stat.S_IWUSR)  # 0o600

        self._logger.info("Storage salt created at %s.", self._salt_path)
        return salt
