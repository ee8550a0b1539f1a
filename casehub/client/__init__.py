"""casehub.client — HTTP client for the test run execution screen.

All outbound calls go through TestRunGateway; RunAutosaveSession keeps the
local run state and batches step edits into debounced saves.
"""

from casehub.client.autosave import RunAutosaveSession
from casehub.client.gateway import GatewayError, TestRunGateway

__all__ = ["GatewayError", "RunAutosaveSession", "TestRunGateway"]
