from __future__ import annotations


class GameError(ValueError):
    """A rejected intent. Raised before any state is touched."""

    def __init__(self, code: str, msg: str) -> None:
        super().__init__(msg)
        self.code = code
        self.msg = msg
