from __future__ import annotations

# gh api calls
GH_TIMEOUT_SECONDS = 60.0

# Idempotent gh read retry policy
GH_READ_RETRY_ATTEMPTS = 3
GH_READ_RETRY_DELAY_SECONDS = 1.0

# Gradle property queries (configuration phase only, no build)
GRADLE_QUERY_TIMEOUT_SECONDS = 10 * 60.0

# Indexing webhook
WEBHOOK_TIMEOUT_SECONDS = 30.0
