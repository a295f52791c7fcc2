"""Base interfaces for package discoverers.

Discoverers enumerate the packages installed by one package manager, either
by reading its local database directly or by running its command-line tool.
"""

import logging
import shutil
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from syld.models import PackageRecord

logger = logging.getLogger(__name__)


class DiscoveryError(OSError):
    """Raised when a package manager command fails or cannot be run."""


class BaseDiscoverer(ABC):
    """Abstract base class for package discoverers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return a stable, lowercase identifier matching the PackageSource value.

        Returns:
            Name like "pacman", "apt", etc.
        """
        ...

    @abstractmethod
    def is_available(self) -> bool:
        """Check whether this package manager is present on the system.

        Must be cheap: only check that the database or executable exists.
        """
        ...

    @abstractmethod
    def discover(self) -> list[PackageRecord]:
        """Enumerate every package installed by this package manager.

        Returns:
            Discovered packages.

        Raises:
            FileNotFoundError: If the database does not exist.
            OSError: If the database cannot be read or the package manager
                command fails.
        """
        ...


class DatabaseDiscoverer(BaseDiscoverer):
    """Discoverer reading a package manager's on-disk database.

    Attributes:
        db_path: Location of the package manager's database.
    """

    DEFAULT_DB_PATH: Path

    def __init__(self, db_path: Optional[Path] = None) -> None:
        """Initialize the discoverer.

        Args:
            db_path: Override of the database location, mostly for tests.
        """
        self.db_path = db_path or self.DEFAULT_DB_PATH


class CommandDiscoverer(BaseDiscoverer):
    """Discoverer that asks a package manager's CLI for its package list.

    Attributes:
        executable: Program run by this discoverer, looked up on PATH.
        timeout: Seconds before a command is abandoned.
    """

    EXECUTABLE: str
    DEFAULT_TIMEOUT = 60

    def __init__(self, executable: Optional[str] = None, timeout: int = DEFAULT_TIMEOUT) -> None:
        self.executable = executable or self.EXECUTABLE
        self.timeout = timeout

    def is_available(self) -> bool:
        return shutil.which(self.executable) is not None

    def _run(self, *args: str, program: Optional[str] = None) -> str:
        """Run the package manager and return its standard output.

        Args:
            *args: Command-line arguments.
            program: Program to run instead of the discoverer's executable.

        Raises:
            DiscoveryError: If the program is missing, times out or exits
                with a non-zero status.
        """
        program = program or self.executable
        cmd = [program, *args]
        logger.debug("Running %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd, capture_output=True, text=True, check=False, timeout=self.timeout
            )
        except FileNotFoundError as e:
            raise DiscoveryError(f"{program} not found") from e
        except subprocess.TimeoutExpired as e:
            raise DiscoveryError(f"{' '.join(cmd)} timed out after {self.timeout}s") from e

        if result.returncode != 0:
            raise DiscoveryError(
                f"{' '.join(cmd)} failed with exit code {result.returncode}: "
                f"{result.stderr.strip()}"
            )
        return result.stdout
