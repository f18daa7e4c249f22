"""Shared test fixtures for AI Sales advisor tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Test hermeticity
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _force_hermetic_test_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("LLM_PROVIDER", "none")
    monkeypatch.setenv("OPENAI_API_KEY", "")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "")
    monkeypatch.setenv("CONTENT_DIR", "")
    monkeypatch.setenv("UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setenv("FREE_BUILD_LIMIT", "1")

# Allow running tests without `pip install -e .` by making `src/` importable.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_SRC_DIR = _PROJECT_ROOT / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from aisales.core.session.store import SessionStore  # noqa: E402
from aisales.domains.advisor.domain_logic.guidance import (  # noqa: E402
    GuidanceRegistry,
    load_guidance_registry,
)
from aisales.domains.advisor.domain_logic.templates import (  # noqa: E402
    TemplateLibrary,
    load_template_library,
)
from aisales.domains.advisor.domain_logic.variants import VariantSelector  # noqa: E402

# 1x1 transparent PNG
PNG_BASE64 = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="


# ---------------------------------------------------------------------------
# Content fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def library() -> TemplateLibrary:
    """The packaged template library."""
    return load_template_library()


@pytest.fixture(scope="session")
def guidance() -> GuidanceRegistry:
    """The packaged tone and builder tables."""
    return load_guidance_registry()


@pytest.fixture
def selector(library: TemplateLibrary, guidance: GuidanceRegistry) -> VariantSelector:
    return VariantSelector(library, guidance)


@pytest.fixture
def sessions() -> SessionStore:
    return SessionStore(history_capacity=12)


@pytest.fixture
def png_attachment() -> dict[str, str]:
    """Inline attachment argument as the tools accept it."""
    return {"name": "hero.png", "mime_type": "image/png", "data": PNG_BASE64}
