"""Top-level package for the cab booking core.

The package prices trips under the Jersey taxi tariffs, compiles rider
itineraries into dispatch orders, and manages the short-lived bearer
token used against the dispatch API.

HTTP handlers, persistence and page rendering live in the surrounding
application and drive this package through ``container.Container``.
"""
