"""Domain packages for the gig planner API"""
