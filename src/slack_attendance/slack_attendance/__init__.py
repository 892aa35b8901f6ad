"""Slack Attendance package.

This package is organized by feature modules (workplaces, attendance, reports, slack)
with a thin Flask controller layer and service/repository layers underneath.
"""
