"""Activity Tracker package.

Organized by feature modules (users, activities, scope, reports, ...) with a
thin Flask controller layer over service/repository layers.
"""
