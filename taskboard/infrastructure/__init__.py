"""Infrastructure layer: upstream HTTP client and cache backends."""
