"""
Explorer Service package for the Tangle Explorer.

The explorer answers ledger queries for several networks and protocol
generations, keeping gateway responses in an in-memory tangle cache:
- Read-through: repeated lookups within the stale time never hit the gateway
- Negative results and gateway errors are never cached
- A background sweeper evicts entries older than the stale time

Structure:
- app.main: FastAPI app and routes.
- app.networks: Network registry.
- app.adapters: HTTP clients for the explorer gateway.
- app.caching: Cache store, read-through policy, sweeper and cache services.
- app.models: Request and response shapes.
"""
