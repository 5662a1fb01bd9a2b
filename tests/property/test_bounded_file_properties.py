from __future__ import annotations

import tempfile
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from dblog_file.core.formatting import interpolate
from dblog_file.plugins.sinks.bounded_file import BoundedFileSink

pytestmark = pytest.mark.property

line_text = st.text(
    alphabet=st.characters(min_codepoint=32, max_codepoint=0x2FFF, blacklist_categories=("Cs",)),
    max_size=40,
)


@given(
    max_lines=st.integers(min_value=1, max_value=12),
    existing=st.lists(line_text, max_size=20),
    new=st.lists(line_text, min_size=1, max_size=20),
)
@settings(max_examples=100, deadline=None)
def test_file_keeps_newest_lines_up_to_cap(
    max_lines: int, existing: list[str], new: list[str]
) -> None:
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "p.log"
        if existing:
            path.write_text("".join(f"{s}\n" for s in existing), encoding="utf-8")
        sink = BoundedFileSink(path)

        for text in new:
            assert sink.append(text, max_lines=max_lines)

        lines = path.read_text(encoding="utf-8").split("\n")[:-1]
        assert len(lines) == min(len(existing) + len(new), max_lines)
        # The most recent records are the tail of the file, in order
        expected = (existing + new)[-len(lines):]
        assert lines == expected
        assert lines[-1] == new[-1]


@given(
    keys=st.lists(
        st.text(alphabet="abcdefghij", min_size=1, max_size=6), min_size=1, max_size=5, unique=True
    ),
    values=st.lists(st.integers(), min_size=5, max_size=5),
)
@settings(max_examples=100)
def test_interpolation_substitutes_every_placeholder(keys: list[str], values: list[int]) -> None:
    context = dict(zip(keys, values))
    template = " ".join("{" + k + "}" for k in keys)

    assert interpolate(template, context) == " ".join(str(context[k]) for k in keys)
