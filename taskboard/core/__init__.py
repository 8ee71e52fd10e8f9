"""Core: settings, constants, lifespan, exception handlers and rate limiter."""
