"""devops-tools command line."""
