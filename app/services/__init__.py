"""Service layer for the survey admin console."""
