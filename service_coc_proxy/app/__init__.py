"""
Clash of Clans access proxy package.

The proxy fronts the Clash of Clans API, providing:
- Credential rotation across one or more API keys
- Short-lived in-memory caching of successful responses
- Normalized relaying of upstream errors

Structure:
- app.main: FastAPI app, routes, and service wiring.
- app.adapters: HTTP clients for the upstream API and IP-echo services.
- app.caching: Response cache and the cache-aware call path.
- app.credentials: API key rotation.
- app.domain: Tags, resources, and result envelopes.
"""
