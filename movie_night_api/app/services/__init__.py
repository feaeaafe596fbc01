"""
Service layer.

Each service holds the business logic for one area and works on the
collections its data provider loads.  Services are built once by the
composition root in ``app.dependencies``.
"""
