"""
Taskboard.

- backend/: Note lifecycle, groups, archive history, API, database, configuration
"""
