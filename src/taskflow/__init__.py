"""Taskflow API: personal task management backend."""
