"""Setup-time error taxonomy.

Every error carries the offending name(s) as attributes and in its message.
None of these are recoverable mid-build: the setup aborts and the error
propagates to the caller.
"""

from __future__ import annotations


class CollimatorSetupError(Exception):
    """Base class for all geometry and physics setup failures."""


class InvalidDimension(CollimatorSetupError, ValueError):
    """Malformed shape parameter, dimension value or cut length."""

    def __init__(self, name: str, value: object, reason: str) -> None:
        self.name = name
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid dimension {name!r} = {value!r}: {reason}")


class UnconfiguredDimension(CollimatorSetupError, ValueError):
    """A required dimension is still unset when building starts."""

    def __init__(self, name: str, missing: list[str] | None = None) -> None:
        self.name = name
        self.missing = list(missing) if missing else [name]
        super().__init__(
            f"Dimension {name!r} is not configured "
            f"(unset: {', '.join(self.missing)})"
        )


class UnknownMaterial(CollimatorSetupError, KeyError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown material: {name!r}")

    def __str__(self) -> str:
        return self.args[0]


class UnknownPackage(CollimatorSetupError, KeyError):
    def __init__(self, name: str, menu: list[str]) -> None:
        self.name = name
        self.menu = list(menu)
        super().__init__(
            f"Unknown physics package: {name!r} (known: {', '.join(self.menu)})"
        )

    def __str__(self) -> str:
        return self.args[0]


class DuplicateVolumeName(CollimatorSetupError, ValueError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"Volume name {name!r} already used for a different volume"
        )


class OverlapDetected(CollimatorSetupError, RuntimeError):
    """A placed volume overlaps a sibling or protrudes from its mother."""

    def __init__(self, child_name: str, sibling_name: str, protrusion: bool = False) -> None:
        self.child_name = child_name
        self.sibling_name = sibling_name
        self.protrusion = protrusion
        if protrusion:
            msg = f"Volume {child_name!r} protrudes from its mother {sibling_name!r}"
        else:
            msg = f"Volume {child_name!r} overlaps sibling {sibling_name!r}"
        super().__init__(msg)


class OrderingViolation(CollimatorSetupError, RuntimeError):
    """A lifecycle call was made out of sequence."""

    def __init__(self, operation: str, state: str) -> None:
        self.operation = operation
        self.state = state
        super().__init__(f"Cannot call {operation}() in state {state!r}")
