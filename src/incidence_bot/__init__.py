"""
Incidence Bot - scheduled COVID-19 incidence notifications for Discord.

This package provides:
- District data fetching from the corona-zahlen.org API
- Weekly incidence evaluation against an alert threshold
- Discord status and alert messages on a cron schedule
"""

__version__ = "0.1.0"
