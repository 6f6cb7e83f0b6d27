"""
Service layer abstraction.

Each service encapsulates business logic for one concern of the game
catalog: compiling filters, reading the catalog store, resolving
accounts and per-game status, aggregating ratings and assembling the
enriched records returned by the API.  API handlers only ever talk to
``GameService``.
"""
