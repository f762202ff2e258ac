# tests/conftest.py
import os, sys, pathlib

# Keep tests independent of the developer's shell/.env
os.environ.setdefault("APP_ENV", "development")
os.environ.pop("GLM_API_KEY", None)
os.environ.pop("OTEL_EXPORTER_OTLP_ENDPOINT", None)

# Add <repo>/src to sys.path so `import textdeck...` works under pytest
ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))
