import os
from pathlib import Path

import pytest

from builders import write_sample_disc


@pytest.fixture
def sample_disc(tmp_path: Path) -> Path:
    """Disc root containing a synthetic VIDEO_TS with three titles in two title sets."""
    root = tmp_path / "DISC"
    write_sample_disc(root)
    return root


@pytest.fixture
def real_disc() -> Path:
    """Path to a real disc for smoke tests.

    Uses DVDCHAP_TEST_DISC if set (disc root or VIDEO_TS dir), otherwise
    the test is skipped; no real disc images are bundled.
    """
    env: str | None = os.environ.get("DVDCHAP_TEST_DISC")
    if not env:
        pytest.skip("DVDCHAP_TEST_DISC not set")
    p = Path(env)
    if not p.exists():
        pytest.skip(f"No disc found at {p}")
    return p
