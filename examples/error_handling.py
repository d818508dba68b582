"""Error handling — OpResult kinds, duplicate accounts, and raising setup.

Demonstrates how store operations report failures as values, and how the
raising ``link()`` variant exposes typed errors.
"""

from __future__ import annotations

import tempfile

from share_store import (
    AppCredentials,
    DuplicateAccount,
    ErrorKind,
    Share,
    ShareStoreError,
    StoreRegistry,
)

if __name__ == "__main__":
    with tempfile.TemporaryDirectory() as tmp:
        registry = StoreRegistry(app=AppCredentials(key="demo-key", secret="demo-secret"))
        store = registry.setup_store("local", lambda url: "code", root=tmp, account_id=1)
        assert store is not None

        # --- Invalid share IDs are reported, not raised ---
        result = store.upload(Share(sid="../escape", data=b"x"))
        print(f"upload ok={result.ok} kind={result.kind}")
        assert result.kind is ErrorKind.INVALID_SHARE_ID

        # --- Deleting something that is not there ---
        result = store.delete("missing")
        print(f"delete ok={result.ok} message={result.message}")

        # --- Linking the same account twice ---
        again = registry.new_store("local", root=tmp, account_id=1)
        try:
            again.link(registry, lambda url: "code")
        except DuplicateAccount as exc:
            print(f"\nDuplicateAccount: {exc}")
            print(f"  account_id={exc.account_id}, kind={exc.kind}")

        # --- Catch any share_store error with the base class ---
        unbound = registry.new_store("local", root=tmp)
        try:
            unbound.to_record()
        except ShareStoreError as exc:
            print(f"\nShareStoreError ({type(exc).__name__}): {exc}")

    print("\nDone!")
