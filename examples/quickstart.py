"""Quickstart: write, read and list blobs with cdn-store.

Demonstrates:
- Creating a ContentDeliveryDriver for the stage environment
- Storing and reading back content
- Checking metadata and listing a repository

Set ``CDN_STORE_API_KEY`` before running.
"""

from __future__ import annotations

import logging

from cdn_store import ContentDeliveryDriver

ROOT = "/docker/registry/v2/repositories/demo"

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    with ContentDeliveryDriver(environment="stage") as driver:
        # Write a blob; the bucket ("demo") is taken from the path
        driver.put_content(f"{ROOT}/_manifests/tags/latest/current/link", b"sha256:abc123")

        # Read it back
        content = driver.get_content(f"{ROOT}/_manifests/tags/latest/current/link")
        print(f"Content: {content!r}")

        # Check metadata
        info = driver.stat(f"{ROOT}/_manifests/tags/latest/current/link")
        print(f"Size: {info.size} bytes")
        print(f"Modified: {info.modified_at}")

        # Everything stored under the repository
        for path in driver.list(ROOT):
            print(f"  {path}")

        driver.delete(f"{ROOT}/_manifests")

    print("Done!")
