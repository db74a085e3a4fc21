from __future__ import annotations

# gh CLI calls (auth status, release create with upload)
GH_TIMEOUT_SECONDS = 60.0
GH_UPLOAD_TIMEOUT_SECONDS = 10 * 60.0

# Install, build and pack commands
BUILD_TIMEOUT_SECONDS = 30 * 60.0
