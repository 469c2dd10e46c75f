"""Exceptions raised by the sysmonitor samplers."""


class SamplerError(Exception):
    """Base class for sampler failures."""


class SourceUnavailable(SamplerError):
    """A /proc path could not be opened or read."""

    def __init__(self, path: str, reason: str = "") -> None:
        self.path = path
        self.reason = reason
        message = f"cannot read {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class MalformedRecord(SamplerError):
    """Content did not match the expected field layout."""


class MalformedStat(MalformedRecord):
    """A per-process stat record could not be parsed."""
