"""Staged writes: stream into a writer, resume with append, commit or cancel.

Writers buffer to a local staging file. Nothing is visible remotely until
``commit()`` uploads the staged bytes as a single entry.

Set ``CDN_STORE_API_KEY`` before running.
"""

from __future__ import annotations

import tempfile

from cdn_store import CommitFailed, ContentDeliveryDriver

UPLOAD = "/docker/registry/v2/repositories/demo/_uploads/session-1/data"

if __name__ == "__main__":
    with tempfile.TemporaryDirectory() as staging, ContentDeliveryDriver(
        environment="stage", staging_root=staging
    ) as driver:
        # --- First chunk, then close without publishing ---
        writer = driver.writer(UPLOAD)
        writer.write(b"first chunk\n")
        writer.close()
        print(f"Staged {writer.size} bytes at {writer.staging}")

        # --- Resume the same upload and publish it ---
        writer = driver.writer(UPLOAD, append=True)
        writer.write(b"second chunk\n")
        try:
            writer.commit()
        except CommitFailed as exc:
            # The writer stays open and keeps its staging file; retry later or cancel.
            print(f"Commit failed during {exc.step}: {exc.__cause__}")
            writer.cancel()
        else:
            print(f"Committed: {driver.get_content(UPLOAD)!r}")

        # --- Leaving a block with an exception cancels the writer ---
        try:
            with driver.writer(UPLOAD) as abandoned:
                abandoned.write(b"never published")
                raise RuntimeError("client went away")
        except RuntimeError:
            print(f"Writer state after error: {abandoned.state}")

        # --- Stream the content back from an offset ---
        with driver.reader(UPLOAD, offset=6) as stream:
            print(f"From offset 6: {stream.read()!r}")

        driver.delete(UPLOAD)

    print("Done!")
