"""Infrastructure: settings, logging, database access, repositories."""
