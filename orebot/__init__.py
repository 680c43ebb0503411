"""Round-based on-chain auto-deployer: board tracking, EV ranking and end-of-round deployment."""

__version__ = "2.0.0"
