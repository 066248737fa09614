"""Client library for the washrelay HTTP API."""

from washrelay.client.relay_client import (
    Machine,
    MachineNotFoundError,
    RelayClient,
    RelayClientError,
)

__all__ = ["Machine", "MachineNotFoundError", "RelayClient", "RelayClientError"]
