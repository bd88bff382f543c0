"""Object store interfaces."""
