"""
Shared, cross-cutting code for the API.

`core/` should contain small building blocks that multiple features use
(DB wiring, settings, logging, error handlers). Keep feature-specific SQL and
request handling in the corresponding feature package (e.g. `companies/`).
"""
