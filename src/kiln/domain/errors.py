from typing import Optional


class KilnError(Exception):
    """base class for exceptions in kiln."""
    pass


class TransportFailure(KilnError):
    """raised when an HTTP fetch could not complete."""
    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"failed to fetch {url}: {reason}")


class DecodeFailure(KilnError):
    """raised when a registry record does not have the expected shape."""
    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"invalid registry record from {url}: {reason}")


class MalformedLocator(KilnError):
    """raised when a registry URL could not be built."""
    pass


class InvalidVersionSpec(KilnError):
    """raised when a version string is not valid for the package source."""
    def __init__(self, message: str, hint: Optional[str] = None):
        self.hint = hint
        super().__init__(message)

    def __str__(self) -> str:
        message = super().__str__()
        if self.hint:
            return f"{message}\n{self.hint}"
        return message


class ExperimentalFeatureDisabled(KilnError):
    """raised when an experimental feature is used without opting in."""
    def __init__(self, feature: str):
        self.feature = feature
        super().__init__(
            f"{feature} is experimental. "
            "Enable it with KILN_EXPERIMENTAL=1 or `kiln config set KILN_EXPERIMENTAL 1`."
        )


class ExecutionFailure(KilnError):
    """raised when the delegated package manager exits nonzero."""
    def __init__(self, program: str, returncode: int, output: str = ""):
        self.program = program
        self.returncode = returncode
        self.output = output
        message = f"{program} exited with status {returncode}"
        if output.strip():
            message = f"{message}\n{output.rstrip()}"
        super().__init__(message)


class ConfigError(KilnError):
    """raised when a configuration value cannot be parsed."""
    pass
