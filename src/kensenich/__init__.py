"""
KensenichManager - personal productivity and business backend.

Areas:
- Work: tasks, work sessions, goals, SOPs, daily habits
- Business: CRM contacts and tasks, job applications, projects, branding
- Content: ideas, reusable archive assets, calendar
- Assistant: chat agent with text-marker tool calling
"""

__version__ = "1.0.0"
