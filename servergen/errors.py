"""Exceptions raised while loading a spec and generating code from it."""

from __future__ import annotations


class GeneratorError(Exception):
    """Base class for every failure surfaced by servergen."""


class InvalidSpecError(GeneratorError):
    """The input document is not a minimally well-formed API description."""


class UnknownTargetError(GeneratorError):
    """No target is registered under the requested name."""

    def __init__(self, name: str, available: list[str]) -> None:
        self.name = name
        self.available = available
        super().__init__(
            f'No generator found for language "{name}"'
            f" (available: {', '.join(available) or 'none'})"
        )


class TemplateLoadError(GeneratorError):
    """The template set for a target could not be loaded."""


class RenderError(GeneratorError):
    """Rendering or writing a single artifact failed."""

    def __init__(self, artifact: str, cause: BaseException) -> None:
        self.artifact = artifact
        super().__init__(f"Error generating {artifact}: {cause}")


class UnresolvedReferenceError(GeneratorError):
    """A $ref points at a schema that is not defined in the spec."""

    def __init__(self, ref: str) -> None:
        self.ref = ref
        super().__init__(f"Unresolved schema reference: {ref}")


class ReferenceCycleError(GeneratorError):
    """An allOf chain refers back to a schema that is still being merged."""

    def __init__(self, chain: list[str]) -> None:
        self.chain = chain
        super().__init__(f"Reference cycle while merging allOf: {' -> '.join(chain)}")
