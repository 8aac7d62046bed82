"""focusdesk: local persistence backend for notes, tasks, projects, tags and pomodoro sessions."""

__version__ = "0.1.0"
