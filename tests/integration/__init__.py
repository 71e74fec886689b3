"""Integration tests for fork synchronization.

These tests drive the sync engine against real git repositories created in
temporary directories: a bare "upstream", a bare "fork" cloned from it, and
scratch clones used to push commits to either side. No network access or
LLM service is needed; conflict resolution is replaced by a local fake.

Run them with:
    pytest tests/integration -m integration
"""
