"""Exceptions raised by the NIfTI-1 codec.

Only structural failures raise. Recoverable conditions (reading past the end
of a buffer, unknown type codes, a flipped byte order) are appended to the
stream's diagnostics list instead.
"""


class NiftiError(ValueError):
    """Base class for NIfTI codec errors."""


class MalformedHeaderError(NiftiError):
    """Header size is wrong in both byte orders, or the magic string is invalid."""

    def __init__(self, message: str, field: str = None, value=None):
        super().__init__(message)
        self.field = field
        self.value = value

    def __str__(self) -> str:
        base_msg = super().__str__()
        if self.field is not None:
            return f"{base_msg} ({self.field}={self.value!r})"
        return base_msg


class UnsupportedDatatypeError(NiftiError):
    """Voxel datatype code has no decoder."""

    def __init__(self, datatype: int):
        super().__init__(f"Unsupported NIfTI datatype: {datatype}")
        self.datatype = datatype
