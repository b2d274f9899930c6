"""
Test suite for the OneWay core.

Focus areas:
- Reducer totality and coalesced dispatch
- Commit ordering and broadcast delivery
- Effect subscriptions and cancellation
- Tracing and the global registry
"""
