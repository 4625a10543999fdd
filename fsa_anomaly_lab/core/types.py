"""Core type aliases for the simulation."""

from typing import NewType

# Node identification - stable "node-<n>" identifier assigned at registry creation
NodeId = NewType("NodeId", str)

# Run identification - human-readable name generated per reset
RunId = NewType("RunId", str)
