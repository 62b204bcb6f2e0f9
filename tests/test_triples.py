"""Tests for tripleparser.triples: validation, identity keys and dedupe."""

from __future__ import annotations

import random

import pytest

from tripleparser.items import EAVTriple, SPOTriple
from tripleparser.triples import (
    dedupe_triples,
    is_valid,
    merge_triples,
    parse_triple,
    parse_triples,
    triple_key,
)

# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

class TestParseTriple:
    def test_tagged_spo(self):
        t = parse_triple({"type": "spo_triple", "subject": " X ", "predicate": "is", "object": "Y"})
        assert t == SPOTriple(subject="X", predicate="is", object="Y")

    def test_tagged_eav(self):
        t = parse_triple({"type": "eav_triple", "entity": "Acme", "attribute": "founded",
                          "value": 1999})
        assert isinstance(t, EAVTriple)
        assert t.value == "1999"

    @pytest.mark.parametrize("tag", ["spo", "SPO", " spo_triple "])
    def test_short_and_mixed_case_tags(self, tag):
        t = parse_triple({"type": tag, "subject": "a", "predicate": "b", "object": "c"})
        assert isinstance(t, SPOTriple)
        assert t.type == "spo_triple"

    def test_untagged_classified_by_shape(self):
        assert isinstance(parse_triple({"entity": "a", "attribute": "b", "value": "c"}), EAVTriple)
        assert isinstance(parse_triple({"subject": "a", "predicate": "b", "object": "c"}),
                          SPOTriple)

    def test_bare_array(self):
        assert parse_triple(["a", "b", "c"]) == SPOTriple(subject="a", predicate="b", object="c")
        assert parse_triple(["a", "b"]) is None

    @pytest.mark.parametrize("raw", [
        {"type": "spo_triple", "subject": "a", "predicate": "  ", "object": "c"},
        {"type": "spo_triple", "subject": "a", "predicate": "b"},
        {"type": "eav_triple", "entity": "a", "attribute": "b", "value": None},
        {"type": "eav_triple", "entity": "a", "attribute": "b", "value": {"x": 1}},
        {"type": "eav_triple", "entity": "a", "attribute": "b", "value": True},
        {"type": "quad", "subject": "a", "predicate": "b", "object": "c"},
        {"foo": "bar"},
        "a string",
        42,
        None,
    ])
    def test_invalid(self, raw):
        assert parse_triple(raw) is None
        assert not is_valid(raw)

    @pytest.mark.parametrize("seed", range(20))
    def test_valid_iff_fields_non_blank(self, seed):
        rng = random.Random(seed)
        pool = ["", " ", "\t", "x", " y ", "zz"]
        fields = {f: rng.choice(pool) for f in ("subject", "predicate", "object")}
        expected = all(v.strip() for v in fields.values())
        assert is_valid({"type": "spo_triple", **fields}) is expected

    def test_parse_triples_drops_invalid(self):
        raws = [
            {"type": "spo_triple", "subject": "a", "predicate": "b", "object": "c"},
            {"type": "spo_triple", "subject": "", "predicate": "b", "object": "c"},
            {"type": "eav_triple", "entity": "e", "attribute": "a", "value": "v"},
        ]
        assert [t.type for t in parse_triples(raws)] == ["spo_triple", "eav_triple"]


# ---------------------------------------------------------------------------
# Identity and dedupe
# ---------------------------------------------------------------------------

class TestDedupe:
    def test_case_insensitive_key(self):
        a = parse_triple({"type": "spo", "subject": "Website", "predicate": "has section",
                          "object": "About Us"})
        b = parse_triple({"type": "spo", "subject": "website", "predicate": "HAS SECTION",
                          "object": "about us"})
        assert triple_key(a) == triple_key(b) == "spo:website:has section:about us"
        assert dedupe_triples([a, b]) == [a]

    def test_variants_do_not_collide(self):
        eav = EAVTriple(entity="a", attribute="b", value="c")
        spo = SPOTriple(subject="a", predicate="b", object="c")
        assert dedupe_triples([eav, spo]) == [eav, spo]

    def test_first_seen_order(self):
        x = SPOTriple(subject="x", predicate="p", object="o")
        y = SPOTriple(subject="y", predicate="p", object="o")
        assert dedupe_triples([y, x, y, x]) == [y, x]

    @pytest.mark.parametrize("seed", range(20))
    def test_idempotent(self, seed):
        rng = random.Random(seed)
        words = ["a", "A", "b", "B"]
        triples = [
            SPOTriple(subject=rng.choice(words), predicate=rng.choice(words),
                      object=rng.choice(words))
            if rng.random() < 0.5 else
            EAVTriple(entity=rng.choice(words), attribute=rng.choice(words),
                      value=rng.choice(words))
            for _ in range(rng.randint(0, 30))
        ]
        once = dedupe_triples(triples)
        assert dedupe_triples(once) == once
        assert len({triple_key(t) for t in once}) == len(once)

    def test_merge_structured_first(self):
        structured = [EAVTriple(entity="Acme", attribute="url", value="https://acme.example")]
        model = [
            EAVTriple(entity="acme", attribute="URL", value="https://ACME.example"),
            SPOTriple(subject="Acme", predicate="sells", object="anvils"),
        ]
        merged = merge_triples(structured, model)
        assert merged == [structured[0], model[1]]
