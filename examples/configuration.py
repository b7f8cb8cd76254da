"""Configuration: config-as-code, from_dict() and the driver registry.

Demonstrates building named drivers from configuration and resolving
buckets from a request-scoped repository name.
"""

from __future__ import annotations

import os

from cdn_store import DriverConfig, Registry, RegistryConfig, use_repository

if __name__ == "__main__":
    apikey = os.environ.get("CDN_STORE_API_KEY", "")

    # --- Option 1: Config-as-code with Python objects ---
    config = RegistryConfig(
        drivers={
            "registry": DriverConfig(type="cdn", options={"apikey": apikey, "environment": "stage"}),
            "mirror": DriverConfig(
                type="cdn",
                options={"apikey": apikey, "environment": "prod", "page_size": 500, "bucket_source": "context"},
            ),
        },
    )
    print(f"Configured drivers: {sorted(config.drivers)}")

    # --- Option 2: from_dict(), e.g. loaded from TOML or JSON ---
    raw = {
        "drivers": {
            "registry": {"type": "cdn", "options": {"apikey": apikey, "environment": "stage"}},
        },
    }
    print(f"from_dict(): {RegistryConfig.from_dict(raw).drivers['registry']}")

    # Drivers are created lazily, on first use
    with Registry(config) as registry:
        print(registry)
        mirror = registry.get_driver("mirror")

        # With bucket_source="context" the bucket comes from the bound repository name
        with use_repository("demo"):
            print(f"Entries in 'demo': {len(mirror.list('/'))}")

    # --- Config validation: a driver without a type raises ValueError ---
    try:
        RegistryConfig(drivers={"orphan": DriverConfig(type="")}).validate()
    except ValueError as exc:
        print(f"\nValidation error: {exc}")

    print("\nDone!")
