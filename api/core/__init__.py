"""
Shared, cross-cutting code for the API.

`core/` should contain small building blocks that multiple features use
(DB lifecycle, schema migration, settings, errors, the response envelope,
client-IP detection). Keep feature-specific SQL in the corresponding feature
package (e.g. `users/`).
"""
