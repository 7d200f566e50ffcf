"""Shared fixtures for the mdblocks test-suite."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from mdblocks.core.settings import load_settings

SAMPLE_DOC = """\
# Harmony notes

```prog
title: II-V-I
key: C
note: the classic cadence
---
Dm7 → G7 → Cmaj7
```

```deg
title: Royal road
3m - 4 - 5 - 6m
```

```score
key: G
---
chords: G Em C D
bass: G E C D
```

## Modes

| Mode | Degree |
| --- | --- |
| Ionian | I |
| Dorian | II |

```python
print("not a block")
```

### Turnaround

C → Am → F → G
"""


@pytest.fixture(autouse=True)
def _fresh_settings() -> Iterator[None]:
    """Rebuild cached settings after each test so env tweaks do not leak."""
    yield
    load_settings.cache_clear()


@pytest.fixture
def sample_doc() -> str:
    return SAMPLE_DOC
