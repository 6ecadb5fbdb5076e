"""Order-independent hashing and per-request provenance records.

Every artifact hash goes through ``canonicalize`` first: mapping keys are
sorted recursively, so two structurally equal payloads hash identically no
matter how their keys were inserted. Sequence order is preserved.
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
import logging
import secrets
import string
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel

from gridiron_edge.agents.base import AgentType, Finding

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase


def canonicalize(obj: object) -> object:
    """Reduce ``obj`` to JSON-compatible data with recursively sorted keys."""
    if isinstance(obj, Enum):
        return canonicalize(obj.value)
    if isinstance(obj, BaseModel):
        return canonicalize(obj.model_dump(mode="json"))
    if isinstance(obj, Finding):
        return canonicalize(obj.to_dict())
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return canonicalize(dataclasses.asdict(obj))
    if isinstance(obj, Mapping):
        return {str(k): canonicalize(obj[k]) for k in sorted(obj, key=str)}
    if isinstance(obj, (list, tuple)):
        return [canonicalize(v) for v in obj]
    if isinstance(obj, (set, frozenset)):
        return sorted((canonicalize(v) for v in obj), key=lambda v: json.dumps(v, sort_keys=True))
    return obj


def canonical_json(obj: object) -> str:
    return json.dumps(canonicalize(obj), sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def hash_payload(obj: object) -> str:
    """Full sha256 hex digest of the canonical JSON form of ``obj``."""
    return hashlib.sha256(canonical_json(obj).encode("utf-8")).hexdigest()


def hash_content(text: str) -> str:
    """Short (12 hex char) sha256 digest for prompt and skill document text."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:12]


def findings_hash(findings: Iterable[Finding]) -> str:
    """Hash a finding set; input order does not matter."""
    ordered = sorted(findings, key=lambda f: f.id)
    return hash_payload([f.to_dict() for f in ordered])


def artifact_hash(kind: str, alert_ids: Iterable[str], rules_version: str) -> str:
    """Provenance hash for a script or ladder."""
    return hash_payload({"type": kind, "ids": list(alert_ids), "rules_version": rules_version})


def _to_base36(n: int) -> str:
    if n == 0:
        return "0"
    digits = []
    while n:
        n, rem = divmod(n, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_request_id() -> str:
    """``req-{epoch ms base36}-{6 random base36 chars}``."""
    stamp = _to_base36(int(time.time() * 1000))
    rand = "".join(secrets.choice(_BASE36) for _ in range(6))
    return f"req-{stamp}-{rand}"


@dataclass(frozen=True)
class Provenance:
    """Write-once audit record for one request.

    Attributes:
        request_id: id returned to the client
        prompt_hash: hash of the instruction text sent to a generator ("" if none)
        skill_md_hashes: skill document id → content hash
        findings_hash: hash over the run's finding set
        data_version: stat snapshot identifier
        data_timestamp: stat snapshot epoch ms
        search_timestamps: epoch ms of any external lookups
        agents_invoked: agents that produced findings
        agents_silent: agents that ran but found nothing
        cache_hits: cache lookups served
        cache_misses: cache lookups missed
        llm_model: generator model identity
        llm_temperature: generator sampling temperature
        rules_version: rule set identifier
    """

    request_id: str
    prompt_hash: str
    skill_md_hashes: dict[str, str]
    findings_hash: str
    data_version: str
    data_timestamp: int
    agents_invoked: tuple[str, ...]
    agents_silent: tuple[str, ...]
    rules_version: str
    llm_model: str = ""
    llm_temperature: float = 0.0
    search_timestamps: tuple[int, ...] = ()
    cache_hits: int = 0
    cache_misses: int = 0

    def to_dict(self) -> dict[str, object]:
        data = dataclasses.asdict(self)
        data["agents_invoked"] = list(self.agents_invoked)
        data["agents_silent"] = list(self.agents_silent)
        data["search_timestamps"] = list(self.search_timestamps)
        return data


@dataclass
class ProvenanceInputs:
    """Everything a provenance record is derived from."""

    findings: list[Finding]
    data_version: str
    data_timestamp: int
    rules_version: str
    agents_invoked: list[AgentType] = field(default_factory=list)
    agents_silent: list[AgentType] = field(default_factory=list)
    prompt: str = ""
    skill_docs: dict[str, str] = field(default_factory=dict)
    llm_model: str = ""
    llm_temperature: float = 0.0
    search_timestamps: list[int] = field(default_factory=list)
    cache_hits: int = 0
    cache_misses: int = 0


def build_provenance(inputs: ProvenanceInputs, request_id: str | None = None) -> Provenance:
    return Provenance(
        request_id=request_id or generate_request_id(),
        prompt_hash=hash_content(inputs.prompt) if inputs.prompt else "",
        skill_md_hashes={k: hash_content(v) for k, v in sorted(inputs.skill_docs.items())},
        findings_hash=findings_hash(inputs.findings),
        data_version=inputs.data_version,
        data_timestamp=inputs.data_timestamp,
        agents_invoked=tuple(a.value for a in inputs.agents_invoked),
        agents_silent=tuple(a.value for a in inputs.agents_silent),
        rules_version=inputs.rules_version,
        llm_model=inputs.llm_model,
        llm_temperature=inputs.llm_temperature,
        search_timestamps=tuple(inputs.search_timestamps),
        cache_hits=inputs.cache_hits,
        cache_misses=inputs.cache_misses,
    )


def verify_provenance(provenance: Provenance, inputs: ProvenanceInputs) -> list[str]:
    """Recompute hashes from ``inputs`` and list every field that disagrees."""
    mismatches: list[str] = []

    expected_findings = findings_hash(inputs.findings)
    if provenance.findings_hash != expected_findings:
        mismatches.append(
            f"findings_hash: expected {expected_findings}, got {provenance.findings_hash}"
        )

    expected_prompt = hash_content(inputs.prompt) if inputs.prompt else ""
    if provenance.prompt_hash != expected_prompt:
        mismatches.append(f"prompt_hash: expected {expected_prompt}, got {provenance.prompt_hash}")

    for doc_id, text in inputs.skill_docs.items():
        expected = hash_content(text)
        actual = provenance.skill_md_hashes.get(doc_id)
        if actual != expected:
            mismatches.append(f"skill_md_hashes[{doc_id}]: expected {expected}, got {actual}")

    if provenance.rules_version != inputs.rules_version:
        mismatches.append(
            f"rules_version: expected {inputs.rules_version}, got {provenance.rules_version}"
        )

    if mismatches:
        logger.warning("Provenance %s failed verification: %s", provenance.request_id, mismatches)
    return mismatches
