"""Structured error types for contract violations and shape failures."""

from __future__ import annotations

from dataclasses import dataclass


class FFFError(Exception):
    """Base class for structured fff-jax errors."""


class ContractError(FFFError, TypeError):
    """A container or callable does not satisfy an operation's contract."""


@dataclass(frozen=True)
class CapabilityError(ContractError):
    """Raised before traversal when a container lacks a required capability."""

    where: str
    missing: tuple[str, ...]
    container_type: str | None = None

    def __str__(self) -> str:
        subject = ""
        if self.container_type is not None:
            subject = f" for {self.container_type}"
        return f"{self.where}: missing capability {', '.join(self.missing)}{subject}"


class NotInvocableError(ContractError):
    """No candidate callable accepts the given arguments."""


class ArityError(ContractError):
    """A combinator was called with an argument count it cannot accept."""


class ResultTypeError(ContractError):
    """A transform produced a value that does not match the output element type."""


class PolicyError(ContractError):
    """A traversal engine was built from something that is not a policy."""


class ShapeError(FFFError, ValueError):
    """Input and output sequences have incompatible lengths."""


def capability_error(where: str, missing, container: object | None = None) -> CapabilityError:
    names = tuple(sorted(str(getattr(cap, "value", cap)) for cap in missing))
    container_type = None if container is None else type(container).__name__
    return CapabilityError(where=where, missing=names, container_type=container_type)
