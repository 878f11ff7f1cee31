"""Domain services for the portfolio backend.

- ``validation``: payload validation returning tagged results
- ``profile_service``: profile aggregate create/read/update/delete
- ``search_service``: keyword search, skill filter and top-skills ranking
- ``errors``: error taxonomy mapped to HTTP statuses by the API layer
"""
