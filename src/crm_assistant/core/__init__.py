"""Core package - configuration and shared infrastructure clients."""
