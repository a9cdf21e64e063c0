from abc import ABC, abstractmethod
from typing import Dict, Any, List

class BaseProtocolClient(ABC):
    """
    Abstract base class defining the interface for protocol integrations.
    Protocol clients implement these methods so snapshot builders can treat
    them uniformly.
    """

    @abstractmethod
    def get_balances(self, address: str) -> List[Dict[str, Any]]:
        """
        Retrieves all protocol positions and their values for a given address.

        Args:
            address: The user's wallet address

        Returns:
            One row per market with position amounts and token prices
        """
        pass

    @abstractmethod
    def get_protocol_info(self) -> dict:
        """
        Provides metadata about the protocol integration.

        Returns:
            Dictionary containing protocol information like name, type, and chain
        """
        pass
