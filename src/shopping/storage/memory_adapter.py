"""In-memory cart storage for development and testing.

Can be configured to fail writes, to exercise the best-effort save path.
"""

from shopping.storage.port import CartStorage


class MemoryCartStorage(CartStorage):
    """Dictionary-backed cart storage."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.fail_writes: bool = False
        self.writes: int = 0

    def configure(self, fail_writes: bool) -> None:
        self.fail_writes = fail_writes

    def read(self, key: str) -> str | None:
        return self.data.get(key)

    def write(self, key: str, payload: str) -> None:
        if self.fail_writes:
            raise OSError("Cart storage is unavailable")
        self.data[key] = payload
        self.writes += 1

    def delete(self, key: str) -> None:
        self.data.pop(key, None)
