"""
Job Board Analytics
Reports and dashboards for job seekers, employers and admins.

Architecture:
- PostgreSQL: jobs, applications, views, activity logs (read only here)
- Aggregation engine: pure functions over grouped query rows
- FastAPI: JSON endpoints consumed by the dashboard pages
"""

__version__ = "1.0.0"
