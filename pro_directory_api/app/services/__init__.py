"""
Service layer.

Services hold the business rules and talk to the database; endpoints
only validate input, call a service and translate domain errors.
"""
