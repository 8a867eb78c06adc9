class InstallationError(Exception):
    """Base class for failures raised by the installation."""


class ConfigError(InstallationError, ValueError):
    """Invalid configuration value. Raised while the config is being built."""


class AcquisitionFailure(InstallationError):
    """Camera permission denied or capture device unavailable."""


class DetectionInitFailure(InstallationError):
    """The hand landmark detector could not be created."""
