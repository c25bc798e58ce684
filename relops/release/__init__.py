"""Release bounded context: versions, commit classification, policies, runs."""
