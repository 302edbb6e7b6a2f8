"""
Secret buffer hygiene.

Python offers no guaranteed erasure of immutable ``bytes``; secrets that
pairguard owns are therefore kept in ``bytearray`` buffers that can be
overwritten deterministically instead of waiting for garbage collection.
"""

from typing import Optional, Union

from ..errors import InvalidKeyError


def wipe(buffer: Optional[bytearray]) -> None:
    """Overwrite a bytearray in place with zeros."""
    if buffer is None:
        return
    for i in range(len(buffer)):
        buffer[i] = 0


class SecretBuffer:
    """
    Mutable holder for secret bytes.

    Example:
        >>> with SecretBuffer(b"\\x01" * 32) as secret:
        ...     key = secret.bytes()
    """

    def __init__(self, data: Union[bytes, bytearray, memoryview]):
        self._buffer = bytearray(data)
        self._wiped = False

    def __len__(self) -> int:
        return len(self._buffer)

    def __enter__(self) -> 'SecretBuffer':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.wipe()

    def __repr__(self) -> str:
        state = "wiped" if self._wiped else f"{len(self._buffer)} bytes"
        return f"SecretBuffer(<{state}>)"

    @property
    def is_wiped(self) -> bool:
        return self._wiped

    def bytes(self, start: int = 0, end: Optional[int] = None) -> bytes:
        """
        Copy (a slice of) the secret out as bytes.

        Raises:
            InvalidKeyError: If the buffer has been wiped
        """
        if self._wiped:
            raise InvalidKeyError("Secret material has already been wiped")
        return bytes(self._buffer[start:end])

    def wipe(self) -> None:
        """Zero the buffer; further reads fail."""
        wipe(self._buffer)
        self._wiped = True
