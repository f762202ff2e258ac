from __future__ import annotations
import os
import sys
import uvicorn

# --- Make sure ./src is on sys.path so `textdeck.*` is importable ---
BASE_DIR = os.path.dirname(__file__)        # points to "<repo>/src"
if BASE_DIR not in sys.path:
    sys.path.insert(0, BASE_DIR)

if __name__ == "__main__":
    uvicorn.run("textdeck.main:app", host="0.0.0.0", port=int(os.environ.get("PORT", "3000")), reload=False)
