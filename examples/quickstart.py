"""Quickstart — set up a local store, back up shares, restore and clean.

Demonstrates:
- Creating a StoreRegistry and linking a store to an account
- Uploading shares and describing the remote content
- Restoring every share into a staging directory
- Wiping the remote store
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile

from share_store import AppCredentials, Share, StoreRegistry

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    with tempfile.TemporaryDirectory() as tmp:
        registry = StoreRegistry(app=AppCredentials(key="demo-key", secret="demo-secret"))

        # The local backend accepts any non-empty code; real backends open a browser.
        store = registry.setup_store("local", lambda url: "demo-code", root=tmp, display_name="Demo")
        assert store is not None

        for sid in ("alpha", "beta"):
            result = store.upload(Share(sid=sid, data=os.urandom(64)))
            print(f"upload {sid}: ok={result.ok}")

        print(store.description())

        restored = store.restore()
        print(f"Restored into {restored}: {sorted(os.listdir(restored))}")
        shutil.rmtree(restored)

        report = store.clean()
        print(f"Clean removed {report.deleted}, ok={report.ok}")

    print("Done! Temp directory cleaned up automatically.")
