"""Gig Planner API - monthly musician scheduling, fees, contracts and availability"""

__version__ = "1.0.0"
