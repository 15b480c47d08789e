from enum import IntEnum


class X402Version(IntEnum):
    V1 = 1
    V2 = 2

    @classmethod
    def from_body(cls, value) -> int:
        """
        Resolve the protocol version advertised in a 402 body.

        Missing or falsy values default to version 1. Versions this package
        does not know are passed through unchanged so the server can decide.
        """
        if not value:
            return int(cls.V1)
        try:
            return int(value)
        except (TypeError, ValueError):
            return int(cls.V1)


DEFAULT_X402_VERSION = X402Version.V1
