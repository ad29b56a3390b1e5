"""Application layer – use cases orchestrating the kernel and storage ports."""
