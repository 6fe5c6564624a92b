"""Adapter layer — Pluggable backends behind the query service ports.

Built-in adapters:
  - opensearch: OpenSearch resource index (ResourceSearcher)
  - nats: NATS request/reply access checks (AccessChecker)
  - clearbit: Clearbit Company and Autocomplete APIs (OrganizationSearcher)
  - jwt: Heimdall-issued JWT validation via JWKS (Authenticator)
  - mock: In-memory implementations of every port for local runs and tests

Implement the ports in ``adapters.base`` to connect another backend.
"""
