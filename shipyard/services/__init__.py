"""Application services: building, storing and releasing artifacts, and the quality gates."""
