"""Error taxonomy for the conversion pipeline.

ParseError, UnitConversionError and ExportIOError abort the component being
converted. UnsupportedPrimitive is raised by the tag classifier and recovered
by the converters, which log it and fall back to a safe value.
"""


class ConversionError(Exception):
    """Base class for every error the pipeline reports."""

    kind = "conversion"


class ParseError(ConversionError):
    """The source payload is structurally invalid."""

    kind = "parse"


class UnsupportedPrimitive(ConversionError):
    """A source enumeration value has no canonical counterpart."""

    kind = "unsupported_primitive"

    def __init__(self, category: str, value, fallback=None):
        self.category = category
        self.value = value
        self.fallback = fallback
        message = f"Unsupported {category} {value!r}"
        if fallback is not None:
            message += f", using {getattr(fallback, 'value', fallback)}"
        super().__init__(message)


class UnitConversionError(ConversionError):
    """A coordinate cannot be represented in the target's units."""

    kind = "unit_conversion"


class ExportIOError(ConversionError):
    """Writing an output file failed."""

    kind = "io"

    def __init__(self, path: str, cause: OSError):
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to write {path}: {cause}")
