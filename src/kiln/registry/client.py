from abc import ABC, abstractmethod
from typing import List


class RegistryClient(ABC):
    @abstractmethod
    def get_versions(self, package_name: str) -> List[str]:
        """Get the visible (non-yanked) versions for a package, in registry order."""
        pass

    @abstractmethod
    def package_url(self, package_name: str) -> str:
        """Get the location of the registry document describing a package."""
        pass

    def close(self) -> None:
        """Release any connections held by the client."""
        pass
