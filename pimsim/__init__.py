"""Building blocks for a processing-in-memory DRAM simulator: PIM commands, bursts, .npy I/O and configuration."""

__version__ = "0.1.0"