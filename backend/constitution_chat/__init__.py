"""Constitutional law chat service."""
