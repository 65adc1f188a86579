"""
HTTP API: public routes and the staff console routes.
"""
