"""Exceptions raised while resolving and generating assets."""


class AssetGraphError(Exception):
    """Base class for all assetgraph errors."""


class ConfigurationError(AssetGraphError):
    """Install configuration is missing, invalid or contradictory."""


class AlreadyExistsError(AssetGraphError):
    """An asset's hazardous side effect appears to have happened already.

    Raised from ``load`` to refuse regeneration, e.g. when a Terraform
    state file shows a cluster has been launched from this directory.
    """


class DependencyCycleError(AssetGraphError):
    """An asset transitively depends on itself."""

    def __init__(self, chain: list[str]):
        self.chain = chain
        super().__init__(f"dependency cycle detected: {' -> '.join(chain)}")


class AssetFailedError(AssetGraphError):
    """An asset failed during one phase of resolution.

    The original exception is available as ``cause`` (``__cause__``).
    """

    phase = "resolve"

    def __init__(self, asset: str, cause: BaseException | None = None):
        self.asset = asset
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f'failed to {self.phase} asset "{asset}"{detail}')

    @property
    def cause(self) -> BaseException | None:
        return self.__cause__


class AssetLoadError(AssetFailedError):
    phase = "load"


class AssetGenerationError(AssetFailedError):
    phase = "generate"


class AssetPersistError(AssetFailedError):
    phase = "persist"


class TerraformError(AssetGraphError):
    """The terraform executable is missing or exited non-zero."""

    def __init__(self, message: str, returncode: int | None = None, stderr: str = ""):
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)


class ProvisioningError(AssetGraphError):
    """Infrastructure provisioning failed."""
