"""Object store service clients."""
