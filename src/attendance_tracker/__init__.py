"""School class attendance tracker.

Flask web app for admins, teachers and students: class scheduling and
enrollment, attendance sessions, reports and an LLM-backed attendance
assistant, persisted in MySQL.
"""
