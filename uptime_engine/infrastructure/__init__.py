"""Infrastructure layer - persistence, notifications, observability, tasks."""
