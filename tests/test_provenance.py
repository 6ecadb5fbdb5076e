"""Tests for canonical hashing and provenance records."""

from __future__ import annotations

import re

from gridiron_edge.agents.base import AgentType, make_finding
from gridiron_edge.provenance import (
    ProvenanceInputs,
    artifact_hash,
    build_provenance,
    canonical_json,
    findings_hash,
    generate_request_id,
    hash_content,
    hash_payload,
    verify_provenance,
)


def _findings(ctx):
    return [
        make_finding(AgentType.QB, "rating", "qb_rating_advantage", "A", "s", 1, 10, 1, "r", "c", ctx),
        make_finding(AgentType.WR, "separation", "wr_separation_advantage", "B", "s", 2, 10, 1, "r", "c", ctx),
    ]


class TestHashing:
    def test_key_order_independent(self):
        a = {"b": 1, "a": {"y": [1, 2], "x": None}}
        b = {"a": {"x": None, "y": [1, 2]}, "b": 1}
        assert hash_payload(a) == hash_payload(b)

    def test_sequence_order_matters(self):
        assert hash_payload([1, 2]) != hash_payload([2, 1])

    def test_canonical_json_is_compact(self):
        assert canonical_json({"b": AgentType.QB, "a": (1, 2)}) == '{"a":[1,2],"b":"qb"}'

    def test_hash_lengths(self):
        assert len(hash_payload({})) == 64
        assert len(hash_content("prompt")) == 12

    def test_findings_hash_ignores_order(self, ctx):
        findings = _findings(ctx)
        assert findings_hash(findings) == findings_hash(list(reversed(findings)))

    def test_artifact_hash_depends_on_rules_version(self):
        assert artifact_hash("safe", ["a"], "v1") != artifact_hash("safe", ["a"], "v2")


class TestRequestId:
    def test_format(self):
        assert re.fullmatch(r"req-[0-9a-z]+-[0-9a-z]{6}", generate_request_id())

    def test_unique(self):
        assert generate_request_id() != generate_request_id()


class TestProvenance:
    def _inputs(self, ctx, **overrides):
        data = dict(
            findings=_findings(ctx),
            data_version=ctx.data_version,
            data_timestamp=ctx.data_timestamp,
            rules_version="rules-v1",
            agents_invoked=[AgentType.QB, AgentType.WR],
            agents_silent=[AgentType.TE],
            prompt="system prompt",
            skill_docs={"story": "# Story skill"},
        )
        data.update(overrides)
        return ProvenanceInputs(**data)

    def test_build(self, ctx):
        prov = build_provenance(self._inputs(ctx), request_id="req-1")
        assert prov.request_id == "req-1"
        assert prov.prompt_hash == hash_content("system prompt")
        assert prov.skill_md_hashes == {"story": hash_content("# Story skill")}
        d = prov.to_dict()
        assert d["agents_invoked"] == ["qb", "wr"]
        assert d["agents_silent"] == ["te"]
        assert d["rules_version"] == "rules-v1"

    def test_no_prompt_no_hash(self, ctx):
        prov = build_provenance(self._inputs(ctx, prompt=""))
        assert prov.prompt_hash == ""

    def test_verify_clean(self, ctx):
        inputs = self._inputs(ctx)
        assert verify_provenance(build_provenance(inputs), inputs) == []

    def test_verify_reports_each_mismatch(self, ctx):
        prov = build_provenance(self._inputs(ctx))
        tampered = self._inputs(
            ctx,
            findings=_findings(ctx)[:1],
            prompt="different prompt",
            rules_version="rules-v2",
        )
        problems = verify_provenance(prov, tampered)
        assert [p.split(":")[0] for p in problems] == ["findings_hash", "prompt_hash", "rules_version"]
