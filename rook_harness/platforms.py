"""
Target platforms the harness can drive.
"""

from enum import Enum

from .errors import UnsupportedPlatformError


class PlatformType(Enum):
    """Deployment targets for Rook."""

    KUBERNETES = "Kubernetes"
    BAREMETAL = "BareMetal"
    STANDALONE = "StandAlone"
    NONE = "None"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_string(cls, name: str) -> "PlatformType":
        """
        Look up a platform by its display name, ignoring case.

        Args:
            name: Platform name such as "kubernetes" or "StandAlone"

        Returns:
            Matching PlatformType

        Raises:
            UnsupportedPlatformError: If no platform has that name
        """
        for platform in cls:
            if platform.value.casefold() == name.strip().casefold():
                return platform
        raise UnsupportedPlatformError(name)
