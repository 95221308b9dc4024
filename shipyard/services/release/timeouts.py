from __future__ import annotations

# GH reads (auth status, release view)
GH_TIMEOUT_SECONDS = 60.0

# gh release create uploads three binaries
GH_CREATE_TIMEOUT_SECONDS = 15 * 60.0

# Idempotent GH read retry policy; writes are never retried
GH_READ_RETRY_ATTEMPTS = 3
GH_READ_RETRY_DELAY_SECONDS = 1.0
