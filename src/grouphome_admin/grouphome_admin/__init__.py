"""Group-home administration package.

Organized by feature modules (users, residents, group_homes, ...) with a thin
Flask controller layer on top of service/repository layers.
"""
