"""
Chain - Antelope chain access layer for dropskit.

Provides the chain API client, ABI-driven binary serialization and
transaction assembly.

Uses httpx for HTTP and a small hand-written codec instead of a full SDK.
"""
