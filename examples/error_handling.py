"""Error handling: catching NotFound, Unsupported, InvalidPath, etc.

Demonstrates the normalized error hierarchy and the structured attributes
carried by each error.

Set ``CDN_STORE_API_KEY`` before running.
"""

from __future__ import annotations

from cdn_store import (
    ContentDeliveryDriver,
    InvalidConfiguration,
    InvalidPath,
    NotFound,
    RemoteError,
    StorageError,
    TransportError,
    Unsupported,
)

ROOT = "/docker/registry/v2/repositories/demo"

if __name__ == "__main__":
    # --- InvalidConfiguration ---
    try:
        ContentDeliveryDriver(apikey="k", environment="dev")
    except InvalidConfiguration as exc:
        print(f"InvalidConfiguration: {exc}")

    with ContentDeliveryDriver(environment="stage") as driver:
        # --- NotFound ---
        try:
            driver.get_content(f"{ROOT}/nonexistent")
        except NotFound as exc:
            print(f"\nNotFound: {exc}")
            print(f"  path={exc.path}, driver={exc.driver}")

        # --- InvalidPath (no repository segment to take the bucket from) ---
        try:
            driver.get_content("/docker/registry/v2/blobs/sha256/ab")
        except InvalidPath as exc:
            print(f"\nInvalidPath: {exc}")

        # --- Unsupported ---
        try:
            driver.url_for(f"{ROOT}/blob")
        except Unsupported as exc:
            print(f"\nUnsupported: {exc}")
            print(f"  capability={exc.capability}")

        # --- Remote and network failures ---
        try:
            driver.stat(f"{ROOT}/blob")
        except RemoteError as exc:
            print(f"\nRemoteError ({exc.status_code}): {exc.reason}")
        except TransportError as exc:
            print(f"\nTransportError: {exc} (caused by {type(exc.__cause__).__name__})")
        except StorageError as exc:
            print(f"\nStorageError ({type(exc).__name__}): {exc}")

        # --- Deleting a missing path is a no-op ---
        driver.delete(f"{ROOT}/nonexistent")
        print("\ndelete() of a missing path succeeded silently.")

    print("\nDone!")
