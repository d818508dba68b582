"""Configuration — persisting the registry and rebuilding it later.

Demonstrates to_config()/to_dict() round-tripping through JSON, app
credentials from the environment, and backend configs for Dropbox and S3.
"""

from __future__ import annotations

import json
import tempfile

from share_store import AppCredentials, BackendConfig, RegistryConfig, RetryPolicy, Share, StoreRegistry

if __name__ == "__main__":
    with tempfile.TemporaryDirectory() as tmp:
        # --- Option 1: Register a store and persist the registry as JSON ---
        registry = StoreRegistry(app=AppCredentials(key="demo-key", secret="demo-secret"))
        store = registry.setup_store("local", lambda url: "code", root=tmp, account_id=42)
        assert store is not None
        store.upload(Share(sid="kept", data=b"payload"))

        raw = json.dumps(registry.to_config().to_dict(), indent=2)
        print(raw)

        # --- Option 2: Rebuild from the persisted form, with a custom retry policy ---
        reloaded = StoreRegistry(
            RegistryConfig.from_dict(json.loads(raw)),
            app=AppCredentials(key="demo-key", secret="demo-secret"),
            retry=RetryPolicy(attempts=5, min_wait=1.0, max_wait=30.0),
        )
        found = reloaded.find(42)
        assert found is not None
        print(f"\nReloaded: {found.description()}")

    # --- Option 3: Backend configs for remote services ---
    # App key/secret come from SHARE_STORE_APP_KEY / SHARE_STORE_APP_SECRET when not given.
    app = AppCredentials.from_env()
    dropbox = BackendConfig(type="dropbox", options={"timeout": 60.0})
    s3 = BackendConfig(
        type="s3",
        options={"bucket": "my-backups", "prefix": "host1", "region_name": "eu-west-1"},
    )
    print(f"\nDropbox config: {dropbox}")
    print(f"S3 config: {s3}")
    print(f"App key set: {bool(app.key)}")

    print("\nDone!")
