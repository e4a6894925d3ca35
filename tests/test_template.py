from __future__ import annotations

from hypersearch.template import PLACEHOLDER, has_placeholder, instantiate, render_rate


def test_every_occurrence_replaced_with_same_text() -> None:
    template = ("vw", "-l", "%", "--cache_file=run_%.cache", "--note=%/%")
    tokens = instantiate(template, 0.125)
    assert tokens == ["vw", "-l", "0.125", "--cache_file=run_0.125.cache", "--note=0.125/0.125"]


def test_tokens_without_marker_untouched() -> None:
    template = ("./train", "--passes", "3", "%")
    tokens = instantiate(template, -2.5)
    assert tokens[:3] == ["./train", "--passes", "3"]
    assert tokens[3] == "-2.5"
    assert all(PLACEHOLDER not in t for t in tokens)


def test_rendering_round_trips_exactly() -> None:
    for rate in (0.1, 1 / 3, 1e-7, 12345.678, 2.0):
        assert float(render_rate(rate)) == rate


def test_instantiate_does_not_mutate_template() -> None:
    template = ["a%", "b"]
    instantiate(template, 1.0)
    assert template == ["a%", "b"]


def test_has_placeholder() -> None:
    assert has_placeholder(["vw", "-l", "%"])
    assert has_placeholder(["--rate=%"])
    assert not has_placeholder(["vw", "-l", "0.5"])
