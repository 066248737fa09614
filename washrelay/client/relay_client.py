"""HTTP client for a running washrelay server.

Used by the CLI to simulate machine controllers and inspect machine state.

Usage:
    from washrelay.client import RelayClient

    with RelayClient("http://localhost:3000") as client:
        client.report("A1", "finished")
        machine = client.get_machine("A1")
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from washrelay.exceptions import WashRelayError


class RelayClientError(WashRelayError):
    """Raised when the server rejects a request."""

    pass


class MachineNotFoundError(RelayClientError):
    """Raised when the server has no record for a machine."""

    pass


@dataclass
class Machine:
    """State of one machine as reported by the server."""

    machine_id: str
    status: str
    current_user: str | None
    updated_at: str


class RelayClient:
    """Synchronous client for the washrelay HTTP API.

    Args:
        base_url: Server root, e.g. "http://localhost:3000".
        timeout: Request timeout in seconds (default: 10).
        transport: Optional httpx transport, used by tests.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    def __enter__(self) -> RelayClient:
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def health(self) -> dict[str, str]:
        response = self._client.get("/health")
        response.raise_for_status()
        return response.json()

    def report(self, machine_id: str, phase: str) -> bool:
        """Send a hardware report as a machine controller would.

        Returns:
            Whether the server recognised the phase.

        Raises:
            RelayClientError: If the server rejected the report.
        """
        response = self._client.post(
            "/hardware-report", json={"resource_id": machine_id, "phase": phase}
        )
        if response.status_code == 400:
            raise RelayClientError(response.json().get("error", "invalid report"))
        response.raise_for_status()
        return response.json()["accepted"]

    def list_machines(self) -> list[Machine]:
        response = self._client.get("/v1/machines")
        response.raise_for_status()
        return [Machine(**m) for m in response.json()["machines"]]

    def get_machine(self, machine_id: str) -> Machine:
        """Get one machine.

        Raises:
            MachineNotFoundError: If the machine has never been seen.
        """
        response = self._client.get(f"/v1/machines/{machine_id}")
        if response.status_code == 404:
            raise MachineNotFoundError(f"Machine '{machine_id}' not found")
        response.raise_for_status()
        return Machine(**response.json())
