"""Lambda runtime family checks."""

from enum import Enum


class UnsupportedRuntimeError(ValueError):
    """Raised when a non Node.js runtime is used for a Node.js function."""


class RuntimeFamily(Enum):
    NODEJS = "nodejs"
    PYTHON = "python"
    JAVA = "java"
    DOTNET = "dotnet"
    GO = "go"
    RUBY = "ruby"
    OTHER = "other"


def runtime_family(runtime: str) -> RuntimeFamily:
    """Get the family of a runtime identifier such as ``nodejs20.x``."""
    for family in RuntimeFamily:
        if family is not RuntimeFamily.OTHER and runtime.startswith(family.value):
            return family
    return RuntimeFamily.OTHER


def validate_nodejs_runtime(runtime: str) -> str:
    if runtime_family(runtime) is not RuntimeFamily.NODEJS:
        raise UnsupportedRuntimeError(
            f"Only `NODEJS` runtimes are supported, got: {runtime}"
        )
    return runtime
